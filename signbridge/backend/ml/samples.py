from typing import Optional

from .landmarks import lms_to_dicts


class SignSample:
    """
    One labeled exemplar: a sign name plus the 21 landmarks of a hand.
    Landmarks are kept as JSON-friendly dicts (x, y, z, optional visibility),
    the same shape the database stores.
    """

    def __init__(
        self,
        sign_name: str,
        landmarks,
        file_name: Optional[str] = None,
        source_file_name: Optional[str] = None,
        is_augmented: bool = False,
        frame_index: Optional[int] = None,
    ):
        self.sign_name = sign_name
        self.landmarks = lms_to_dicts(landmarks)
        self.file_name = file_name
        self.source_file_name = source_file_name
        self.is_augmented = is_augmented
        self.frame_index = frame_index

    def replace(self, **changes) -> "SignSample":
        data = self.to_dict()
        data.update(changes)
        return SignSample(**data)

    @classmethod
    def from_obj(cls, obj) -> "SignSample":
        """Build from an ORM row or any object with the same attribute names."""
        return cls(
            sign_name=obj.sign_name,
            landmarks=obj.landmarks,
            file_name=getattr(obj, "file_name", None),
            source_file_name=getattr(obj, "source_file_name", None),
            is_augmented=bool(getattr(obj, "is_augmented", False)),
            frame_index=getattr(obj, "frame_index", None),
        )

    def to_dict(self):
        return {
            "sign_name": self.sign_name,
            "landmarks": [dict(lm) for lm in self.landmarks],
            "file_name": self.file_name,
            "source_file_name": self.source_file_name,
            "is_augmented": self.is_augmented,
            "frame_index": self.frame_index,
        }

    def __repr__(self):
        return f"SignSample({self.sign_name!r}, file_name={self.file_name!r}, augmented={self.is_augmented})"
