"""
CPU inference backend.

Uses Ultralytics YOLO if installed. Boxes come back as xyxy and are
converted to (x, y, width, height) before filtering to people.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from models.detection import BoundingBox, Detection
from .backend import PersonDetector, filter_detections


@dataclass(frozen=True)
class CpuYoloConfig:
    model: str = "yolov8n.pt"
    class_label: str = "person"
    min_score: float = 0.3
    iou_threshold: float = 0.45


class UltralyticsPersonDetector(PersonDetector):
    def __init__(self, cfg: CpuYoloConfig):
        self.cfg = cfg
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or switch detection.backend to 'demo'."
            ) from e

        self._model = YOLO(cfg.model)

    def detect(self, frame: Optional[np.ndarray]) -> List[Detection]:
        if frame is None:
            return []

        results = self._model.predict(
            source=frame,
            conf=self.cfg.min_score,
            iou=self.cfg.iou_threshold,
            verbose=False,
        )
        if not results:
            return []

        r0 = results[0]
        names = getattr(r0, "names", None) or {}
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return []

        xyxy = boxes.xyxy.cpu().numpy() if hasattr(boxes.xyxy, "cpu") else np.asarray(boxes.xyxy)
        conf = boxes.conf.cpu().numpy() if hasattr(boxes.conf, "cpu") else np.asarray(boxes.conf)
        cls = boxes.cls.cpu().numpy() if hasattr(boxes.cls, "cpu") else np.asarray(boxes.cls)

        out: List[Detection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            out.append(
                Detection(
                    bbox=BoundingBox.from_xyxy(float(x1), float(y1), float(x2), float(y2)),
                    score=float(c),
                    class_label=names.get(class_id) or str(class_id),
                )
            )

        return filter_detections(out, self.cfg.class_label, self.cfg.min_score)
