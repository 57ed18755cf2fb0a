# retro_chip8/arch/chip8/platform.py
"""
プラットフォーム能力インターフェース。

乱数源と音の開始/停止通知はホスト側のアダプタが実装し、構築時にエンジンへ注入します。
エンジンはこれらを同期的に呼び出すため、実装はブロックしたりエンジンへ再入したりしてはいけません。
"""
from abc import ABC, abstractmethod


# @intent:responsibility エンジンが依存するが実装しない能力（乱数、音）を定義します。
# @intent:rationale 具体的な実装を注入する形にすることで、テストでは決定的な代替実装を使えます。
class PlatformAdapter(ABC):
    @abstractmethod
    def random_byte(self) -> int:
        """0-255 の擬似乱数を返します。"""
        pass

    @abstractmethod
    def start_sound(self) -> None:
        """サウンドタイマーが 0 から非 0 になったときに呼ばれます。"""
        pass

    @abstractmethod
    def stop_sound(self) -> None:
        """サウンドタイマーが非 0 から 0 になったときに呼ばれます。"""
        pass
