"""
Cluster layer: 画面上のピクセル距離でマーカーをまとめる。

- projection: 緯度経度 → ピクセル距離（線形 / 正距円筒 / Web Mercator）
- builder: シード基準の1パス・クラスタリング
- router: タップ → ズーム or 車両選択
- session: ホスト画面側の再計算ポリシー
"""
__all__ = ["projection", "builder", "catalog", "router", "session"]
