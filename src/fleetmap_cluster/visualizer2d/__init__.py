__all__ = ["cli", "config", "overlay", "renderer", "styles"]
