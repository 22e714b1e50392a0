class ConfigurationError(ValueError):
    """クラスタリング設定が不正（呼び出し側のプログラミングエラー）"""


__all__ = ["ConfigurationError"]
