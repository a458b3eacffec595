import logging
import os
from pathlib import Path
from typing import Optional

import numpy as np
import mediapipe as mp

from .landmarks import NUM_LANDMARKS, lms_to_dicts

logger = logging.getLogger(__name__)


class HandLandmarker:
    """
    Thin wrapper over MediaPipe Tasks HandLandmarker.

    detect() returns a list of hands, each a list of 21 landmark dicts.
    Hands with any other point count are dropped here, so everything
    downstream can rely on 21 joints.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        num_hands: int = 1,
        video: bool = True,
        min_hand_detection_confidence: float = 0.5,
        min_hand_presence_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        self.model_path = self._resolve_model_path(model_path)
        self.video = video

        BaseOptions = mp.tasks.BaseOptions
        MpHandLandmarker = mp.tasks.vision.HandLandmarker
        HandLandmarkerOptions = mp.tasks.vision.HandLandmarkerOptions
        RunningMode = mp.tasks.vision.RunningMode

        options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=str(self.model_path)),
            running_mode=RunningMode.VIDEO if video else RunningMode.IMAGE,
            num_hands=num_hands,
            min_hand_detection_confidence=min_hand_detection_confidence,
            min_hand_presence_confidence=min_hand_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._landmarker = MpHandLandmarker.create_from_options(options)
        self._last_ts_ms = 0
        logger.info("hand landmarker loaded from %s", self.model_path)

    def close(self) -> None:
        self._landmarker.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @staticmethod
    def _resolve_model_path(model_path: Optional[str]) -> Path:
        """
        Find hand_landmarker.task:
          1) explicit model_path
          2) env SIGNBRIDGE_HAND_TASK_PATH
          3) repo root, next to this file, current directory
        """
        if model_path:
            p = Path(model_path).expanduser().resolve()
            if not p.exists():
                raise FileNotFoundError(f"hand_landmarker.task not found: {p}")
            return p

        envp = os.getenv("SIGNBRIDGE_HAND_TASK_PATH", "").strip()
        if envp:
            p = Path(envp).expanduser().resolve()
            if not p.exists():
                raise FileNotFoundError(f"SIGNBRIDGE_HAND_TASK_PATH points to a missing file: {p}")
            return p

        here = Path(__file__).resolve()
        candidates = [
            here.parents[3] / "hand_landmarker.task",
            here.parent / "hand_landmarker.task",
            Path.cwd() / "hand_landmarker.task",
        ]
        for c in candidates:
            if c.exists():
                return c.resolve()

        raise FileNotFoundError(
            "hand_landmarker.task not found.\n"
            "Put it in the repository root or set SIGNBRIDGE_HAND_TASK_PATH."
        )

    def _ensure_ts(self, ts_ms: int) -> int:
        # MediaPipe requires strictly increasing timestamps in VIDEO mode
        if ts_ms <= self._last_ts_ms:
            ts_ms = self._last_ts_ms + 1
        self._last_ts_ms = ts_ms
        return ts_ms

    def detect(self, frame_bgr: np.ndarray, ts_ms: Optional[int] = None) -> list:
        if frame_bgr is None or frame_bgr.ndim != 3 or frame_bgr.shape[2] != 3:
            return []

        frame_rgb = frame_bgr[:, :, ::-1].copy()
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)

        if self.video:
            ts = self._ensure_ts(int(ts_ms or 0))
            result = self._landmarker.detect_for_video(mp_image, ts)
        else:
            result = self._landmarker.detect(mp_image)

        hands = []
        for hand_lms in result.hand_landmarks or []:
            if len(hand_lms) == NUM_LANDMARKS:
                hands.append(lms_to_dicts(hand_lms))
        return hands
