"""
Batch extraction of labeled samples from sign videos.

    signbridge-extract videos/*.mp4 --out samples.json
    signbridge-extract videos/ --save-db --no-mirror --angles -5 5

The sign name comes from the file name: "a_-_8851.mp4" -> "a",
"XinChao.mp4" -> "xinchao".
"""

import argparse
import json
import logging
import re
from pathlib import Path
from typing import List, Optional

import cv2
from dotenv import load_dotenv

from .augmentation import ExtractionConfig, augment
from .landmarker import HandLandmarker
from .samples import SignSample

logger = logging.getLogger(__name__)

VIDEO_EXTS = {".mp4", ".mov", ".avi", ".mkv", ".webm"}


def clean_sign_name(file_name: str) -> str:
    stem = Path(file_name).name.split(".")[0].lower()
    return re.split(r"[-_]", stem)[0]


def read_frame_at(cap: cv2.VideoCapture, fraction: float):
    frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
    if frame_count <= 0:
        return None, -1
    idx = min(frame_count - 1, max(0, int(frame_count * fraction)))
    cap.set(cv2.CAP_PROP_POS_FRAMES, idx)
    ok, frame = cap.read()
    if not ok:
        return None, idx
    return frame, idx


def extract_video(path: Path, landmarker: HandLandmarker, config: ExtractionConfig) -> List[SignSample]:
    sign_name = clean_sign_name(path.name)
    cap = cv2.VideoCapture(str(path))
    if not cap.isOpened():
        logger.warning("cannot open %s", path)
        return []

    samples = []
    try:
        for fraction in config.frame_timestamps:
            frame, idx = read_frame_at(cap, fraction)
            if frame is None:
                logger.warning("%s: no frame at %.2f", path.name, fraction)
                continue
            hands = landmarker.detect(frame)
            if not hands:
                logger.info("%s: no hand at frame %d", path.name, idx)
                continue
            sample = SignSample(
                sign_name=sign_name,
                landmarks=hands[0],
                file_name=f"{path.stem}_f{idx}",
                source_file_name=path.name,
                frame_index=idx,
            )
            if config.enable_augmentation:
                samples.extend(augment(sample, config))
            else:
                samples.extend(augment(sample, ExtractionConfig(rotation_angles=(), enable_mirror=False)))
    finally:
        cap.release()

    logger.info("%s -> %d samples for '%s'", path.name, len(samples), sign_name)
    return samples


def collect_videos(inputs: List[str]) -> List[Path]:
    paths = []
    for item in inputs:
        p = Path(item)
        if p.is_dir():
            paths.extend(sorted(f for f in p.iterdir() if f.suffix.lower() in VIDEO_EXTS))
        elif p.suffix.lower() in VIDEO_EXTS:
            paths.append(p)
    return paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract hand sign samples from videos")
    parser.add_argument("inputs", nargs="+", help="video files or directories")
    parser.add_argument("--out", type=str, default=None, help="write samples to this JSON file")
    parser.add_argument("--save-db", action="store_true", help="store samples in the database")
    parser.add_argument("--model", type=str, default=None, help="path to hand_landmarker.task")
    parser.add_argument("--timestamps", type=float, nargs="+", default=None,
                        help="fractions of the video to sample (default 0.2 0.35 0.5 0.65 0.8)")
    parser.add_argument("--angles", type=float, nargs="*", default=None,
                        help="rotation angles in degrees (default -5 5)")
    parser.add_argument("--no-mirror", action="store_true")
    parser.add_argument("--no-augment", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = build_parser().parse_args(argv)

    config = ExtractionConfig(enable_augmentation=not args.no_augment, enable_mirror=not args.no_mirror)
    if args.timestamps:
        config.frame_timestamps = args.timestamps
    if args.angles is not None:
        config.rotation_angles = args.angles

    videos = collect_videos(args.inputs)
    logger.info("processing %d videos", len(videos))

    samples = []
    with HandLandmarker(args.model, num_hands=1, video=False) as landmarker:
        for path in videos:
            samples.extend(extract_video(path, landmarker, config))

    logger.info("extracted %d samples from %d videos", len(samples), len(videos))

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump([s.to_dict() for s in samples], f, indent=2)
        logger.info("wrote %s", args.out)

    if args.save_db:
        from ..db import Base, engine, get_session
        from ..db import requests as rq

        Base.metadata.create_all(engine)
        db = get_session()
        try:
            saved = rq.save_samples(db, samples)
        finally:
            db.close()
        logger.info("saved %d samples to the database", saved)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
