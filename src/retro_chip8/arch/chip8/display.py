# retro_chip8/arch/chip8/display.py
"""
モノクロ表示バッファ。

描画先の画面への変換はホストの責務で、ここでは1bitのピクセル状態だけを保持します。
"""
from typing import List, MutableSequence, Sequence

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8


# @intent:responsibility 固定サイズのピクセル格子を保持し、クリアとXOR描画だけで変更されます。
class DisplayBuffer:
    """
    行優先で並べた 0/1 のピクセル配列。サイズはインスタンスの生存期間中変わりません。
    """
    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        if width <= 0 or height <= 0:
            raise ValueError("Display dimensions must be positive.")
        self._width = width
        self._height = height
        self._pixels = bytearray(width * height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self._pixels = bytearray(self._width * self._height)

    def get_pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self._width}x{self._height} display.")
        return self._pixels[y * self._width + x]

    # @intent:responsibility スプライトをXORで描画し、点灯から消灯へ変化したピクセルがあったかを返します。
    # @intent:rationale 開始座標は常に画面サイズで折り返し、はみ出したピクセルはwrapに応じて折り返すか切り捨てます。
    def draw_sprite(self, x: int, y: int, rows: Sequence[int], wrap: bool = False) -> bool:
        width = self._width
        height = self._height
        pixels = self._pixels
        origin_x = x % width
        origin_y = y % height
        collision = False

        for row_index, row in enumerate(rows):
            py = origin_y + row_index
            if py >= height:
                if not wrap:
                    break
                py %= height
            for bit in range(SPRITE_WIDTH):
                if not (row >> (7 - bit)) & 1:
                    continue
                px = origin_x + bit
                if px >= width:
                    if not wrap:
                        break
                    px %= width
                index = py * width + px
                if pixels[index]:
                    collision = True
                pixels[index] ^= 1

        return collision

    # @intent:responsibility 行優先の不変コピーを返します。
    def snapshot(self) -> bytes:
        return bytes(self._pixels)

    def rows(self) -> List[List[int]]:
        w = self._width
        return [list(self._pixels[y * w:(y + 1) * w]) for y in range(self._height)]

    # @intent:responsibility 呼び出し元が用意したバッファへピクセルを書き写します。
    def fill(self, buffer: MutableSequence[int]) -> None:
        if len(buffer) < len(self._pixels):
            raise ValueError(f"Buffer of {len(buffer)} cannot hold {len(self._pixels)} pixels.")
        buffer[:len(self._pixels)] = self._pixels
