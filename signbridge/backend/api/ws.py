import asyncio
import base64
import concurrent.futures
import logging
import os
import time
from typing import List, Optional

import cv2
import numpy as np
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from .deps import get_config, get_db
from .schemas.landmark import LandmarkIn
from ..db import requests as rq
from ..ml.landmarks import NUM_LANDMARKS
from ..ml.session import RecognitionSession

router = APIRouter()

DEBUG_WS = os.getenv("SIGNBRIDGE_WS_DEBUG", "0") == "1"
# 0 => process every frame that arrives
INFER_EVERY_MS = int(os.getenv("SIGNBRIDGE_WS_INFER_EVERY_MS", "0"))

logger = logging.getLogger("recognize_ws")


def decode_frame_bgr(data_url: str) -> np.ndarray:
    _, encoded = data_url.split(",", 1)
    img_bytes = base64.b64decode(encoded)
    if not img_bytes:
        raise ValueError("empty frame payload")
    img = cv2.imdecode(np.frombuffer(img_bytes, np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("cv2.imdecode returned None")
    return img


_hand_adapter = TypeAdapter(List[LandmarkIn])


def _hands_from_message(msg: dict) -> list:
    # the adapter only ever hands well-formed 21-point hands to the session
    hands = msg.get("hands")
    if not isinstance(hands, list):
        return []
    out = []
    for h in hands:
        if not isinstance(h, list) or len(h) != NUM_LANDMARKS:
            continue
        try:
            lms = _hand_adapter.validate_python(h)
        except ValidationError:
            continue
        out.append([lm.model_dump(exclude_none=True) for lm in lms])
    return out


@router.websocket("/ws/recognize")
async def recognize_ws(
    ws: WebSocket,
    sentence: int = 0,
    lesson_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    await ws.accept()

    session = RecognitionSession(rq.load_corpus(db, lesson_id), get_config(), sentence=bool(sentence))
    logger.info("session opened: %d samples, sentence=%s, lesson=%s", len(session.corpus), bool(sentence), lesson_id)

    # landmarker lives in one thread for its whole life
    loop = asyncio.get_running_loop()
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)

    frames_in = 0
    decode_err = 0
    infer_n = 0
    last_infer = 0.0
    last_debug = 0.0
    infer_every_s = max(0.0, INFER_EVERY_MS / 1000.0)

    try:
        while True:
            msg = await ws.receive_json()
            kind = msg.get("type")
            now = time.monotonic()

            if kind == "landmarks":
                ts_ms = msg.get("ts_ms")
                out = session.process_hands(_hands_from_message(msg), float(ts_ms) if ts_ms is not None else now * 1000)

            elif kind == "frame":
                data = msg.get("data")
                if not isinstance(data, str):
                    continue
                frames_in += 1
                if infer_every_s > 0 and (now - last_infer) < infer_every_s:
                    continue
                last_infer = now

                try:
                    frame = decode_frame_bgr(data)
                except (ValueError, cv2.error):
                    decode_err += 1
                    continue

                if session.landmarker is None:
                    from ..ml.landmarker import HandLandmarker
                    try:
                        session.landmarker = await loop.run_in_executor(executor, HandLandmarker)
                    except FileNotFoundError as e:
                        logger.error("hand landmarker unavailable: %s", e)
                        await ws.send_json({"type": "error", "detail": str(e)})
                        continue

                out = await loop.run_in_executor(executor, session.process_frame_bgr, frame, int(now * 1000))
                infer_n += 1

            elif kind == "reload":
                session.replace_corpus(rq.load_corpus(db, lesson_id))
                logger.info("corpus reloaded: %d samples", len(session.corpus))
                out = session.state()

            elif kind == "undo":
                out = session.undo()

            elif kind == "clear":
                out = session.clear()

            else:
                continue

            out["type"] = "prediction" if kind in ("landmarks", "frame") else "state"
            await ws.send_json(out)

            if DEBUG_WS and (now - last_debug) > 1.0:
                last_debug = now
                logger.info(
                    f"frames_in={frames_in} decode_err={decode_err} infer={infer_n} "
                    f"last={out.get('stable_prediction')}:{out.get('confidence')}"
                )

    except WebSocketDisconnect:
        pass
    finally:
        if session.landmarker is not None:
            try:
                await loop.run_in_executor(executor, session.close)
            except Exception:
                logger.exception("failed to close hand landmarker")
        executor.shutdown(wait=False)
