__all__ = ["models", "loader"]
