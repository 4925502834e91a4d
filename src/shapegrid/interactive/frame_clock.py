# どこで: `src/shapegrid/interactive/frame_clock.py`。
# 何を: 描画ループのフレーム番号を提供する。
# なぜ: アニメーションとホバー切り替え間隔を実時間から切り離し、フレーム単位で決定的にするため。

from __future__ import annotations


class FrameClock:
    """描画ループのフレーム時計。

    Notes
    -----
    フレーム番号は start_frame から始まり `tick()` で 1 ずつ進む。
    """

    def __init__(self, *, start_frame: int = 0) -> None:
        if int(start_frame) < 0:
            raise ValueError("start_frame は 0 以上である必要がある")
        self._frame = int(start_frame)

    @property
    def frame(self) -> int:
        """現在のフレーム番号（0-based）を返す。"""

        return int(self._frame)

    def tick(self) -> int:
        """フレームを 1 つ進め、新しいフレーム番号を返す。"""

        self._frame += 1
        return self._frame


__all__ = ["FrameClock"]
