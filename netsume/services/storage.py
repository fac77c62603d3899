import io
import logging
import uuid
from typing import Callable, Optional

import cloudinary.uploader

logger = logging.getLogger("uvicorn.error")

ProgressCallback = Callable[[int], None]


class ProgressReader(io.BytesIO):
    """BytesIO that reports the percentage read so far on every chunk read."""

    def __init__(self, data: bytes, on_progress: Optional[ProgressCallback] = None):
        super().__init__(data)
        self.total = len(data)
        self.on_progress = on_progress
        self._last_percent = -1

    def read(self, size=-1):
        chunk = super().read(size)
        if self.on_progress and self.total:
            percent = round(self.tell() * 100 / self.total)
            if percent != self._last_percent:
                self._last_percent = percent
                self.on_progress(percent)
        return chunk


class ResumeStorage:

    def __init__(self, chunk_size: int):
        self.chunk_size = chunk_size

    def upload_resume(
        self,
        uid: str,
        filename: str,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Upload to ``resumes/<uid>/`` and return the retrievable URL."""
        public_id = f"resumes/{uid}/{uuid.uuid4().hex}_{filename}"
        logger.info(f"Uploading resume to Cloudinary: {public_id} ({len(data)} bytes)")
        result = cloudinary.uploader.upload_large(
            ProgressReader(data, on_progress),
            resource_type="auto",
            public_id=public_id,
            chunk_size=self.chunk_size,
            type="upload",
        )
        resume_url = result["secure_url"]
        logger.info(f"Uploaded resume to Cloudinary: {resume_url}")
        return resume_url
