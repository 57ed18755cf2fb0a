# tests/conftest.py
"""
テスト共通のフィクスチャ。
"""
from typing import List

import pytest

from retro_chip8.arch.chip8.platform import PlatformAdapter


# @intent:test_helper 決定的な乱数列を返し、音の開始/停止の呼び出しを記録するプラットフォーム。
class FakePlatform(PlatformAdapter):
    def __init__(self, random_values: List[int] = None):
        self.random_values = list(random_values or [0xFF])
        self.random_calls = 0
        self.events: List[str] = []

    def random_byte(self) -> int:
        value = self.random_values[self.random_calls % len(self.random_values)]
        self.random_calls += 1
        return value

    def start_sound(self) -> None:
        self.events.append("start")

    def stop_sound(self) -> None:
        self.events.append("stop")


@pytest.fixture
def fake_platform():
    return FakePlatform()


@pytest.fixture
def platform_factory():
    return FakePlatform
