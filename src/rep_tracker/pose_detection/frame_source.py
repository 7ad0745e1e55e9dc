import json
import logging
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Tuple

from .landmarks import PoseFrame

logger = logging.getLogger("FrameSource")


class BaseFrameSource(ABC):
    """Base class for anything that yields pose frames to the tracker."""

    @abstractmethod
    def frames(self) -> Iterator[Tuple[Optional[PoseFrame], Optional[str]]]:
        """
        Yield frames in capture order.

        Returns:
            Iterator of (frame, error) pairs:
            - the parsed frame, or None if the record could not be read
            - a description of the problem, or None
        """
        pass


class JsonLinesFrameSource(BaseFrameSource):
    """
    Reads a recorded landmark stream, one JSON object per line:
    {"timestamp": 0.033, "landmarks": [[x, y, z, visibility, presence], ...]}
    A null or empty landmark list is a frame without a subject.
    """

    def __init__(self, path: str):
        self.path = path

    def frames(self) -> Iterator[Tuple[Optional[PoseFrame], Optional[str]]]:
        with open(self.path, "r") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield PoseFrame.from_dict(json.loads(line)), None
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning(f"Skipping line {line_number} of {self.path}: {e}")
                    yield None, f"Line {line_number}: {e}"
