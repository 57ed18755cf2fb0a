# retro_chip8/arch/chip8/keypad.py
"""
16キーの16進キーパッドの状態。

キー入力待ち命令 (FX0A) はスレッドやコルーチンを使わず、このクラスが持つ
「入力待ち」フラグで表現します。CPUは各サイクルの先頭でこのフラグを確認します。
"""
import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

KEY_COUNT = 16


def _validate_key(key: int) -> int:
    if not isinstance(key, int) or not 0 <= key < KEY_COUNT:
        raise ValueError(f"Key must be in 0..{KEY_COUNT - 1}, got {key!r}")
    return key


# @intent:responsibility キーの押下状態と、入力待ちの保留状態を管理します。
class Keypad:
    def __init__(self):
        self._keys: List[bool] = [False] * KEY_COUNT
        self._last_pressed: Optional[int] = None
        self._wait_register: Optional[int] = None
        self._resolved_key: Optional[int] = None

    # @intent:responsibility キーを押下状態にします。入力待ち中であれば、その待ちを解決するキーとして記録します。
    # @intent:rationale 既に押されていたキーは新たな押下とみなしません（押下への遷移だけが待ちを解決します）。
    def press(self, key: int) -> None:
        _validate_key(key)
        if self._keys[key]:
            return
        self._keys[key] = True
        self._last_pressed = key
        if self._wait_register is not None and self._resolved_key is None:
            self._resolved_key = key

    # @intent:responsibility キーを離します。最後に押されたキーと一致する場合だけ、その追跡もクリアします。
    def release(self, key: int) -> None:
        _validate_key(key)
        self._keys[key] = False
        if self._last_pressed == key:
            self._last_pressed = None

    def is_pressed(self, key: int) -> bool:
        return self._keys[_validate_key(key)]

    # @intent:responsibility 最後に押されたキー。インスペクタやデバッガ向けの参照値で、命令の実行には使いません。
    # @intent:rationale SKP/SKNPはキーごとの押下フラグ (is_pressed) を、FX0Aは入力待ちの解決キーを参照します。
    @property
    def last_pressed(self) -> Optional[int]:
        return self._last_pressed

    @property
    def awaiting(self) -> bool:
        return self._wait_register is not None

    # @intent:responsibility 入力待ち中で、まだ解決するキーが押されていない状態かどうか。
    @property
    def blocked(self) -> bool:
        return self._wait_register is not None and self._resolved_key is None

    @property
    def wait_register(self) -> Optional[int]:
        return self._wait_register

    # @intent:pre-condition 保留中の入力待ちは同時に1つまでです。
    def begin_wait(self, register: int) -> None:
        if self._wait_register is not None:
            raise RuntimeError("A key wait is already pending.")
        self._wait_register = register
        self._resolved_key = None
        logger.debug("waiting for key into V%X", register)

    # @intent:responsibility 入力待ちが解決済みなら (レジスタ番号, キー) を返して待ちを解除します。
    def take_resolution(self) -> Optional[Tuple[int, int]]:
        if self._wait_register is None or self._resolved_key is None:
            return None
        resolution = (self._wait_register, self._resolved_key)
        self._wait_register = None
        self._resolved_key = None
        return resolution

    def snapshot(self) -> Tuple[bool, ...]:
        return tuple(self._keys)

    def reset(self) -> None:
        self._keys = [False] * KEY_COUNT
        self._last_pressed = None
        self._wait_register = None
        self._resolved_key = None
