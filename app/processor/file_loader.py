from pathlib import Path

import httpx

from app.processor.exceptions import FileDownloadError, InvalidFileReferenceError

PDF_MIME = "application/pdf"

_MAGIC_NUMBERS: tuple[tuple[bytes, str], ...] = (
    (b"%PDF", PDF_MIME),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)

SUPPORTED_MIME_TYPES = frozenset(
    {PDF_MIME, "image/png", "image/jpeg", "image/gif", "image/webp"}
)


def detect_mime_type(data: bytes, declared: str | None = None) -> str:
    """Sniff the content type from magic bytes, falling back to the declared type.

    Raises:
        InvalidFileReferenceError: if the type is neither PDF nor a supported image.
    """
    head = data[:16]
    # PDF headers may be preceded by junk; readers accept %PDF within the first KB.
    if b"%PDF" in data[:1024]:
        return PDF_MIME
    for magic, mime in _MAGIC_NUMBERS:
        if head.startswith(magic):
            return mime
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    if declared and declared.lower() in SUPPORTED_MIME_TYPES:
        return declared.lower()
    raise InvalidFileReferenceError(
        f"Unsupported content type {declared or 'unknown'!r}; expected a PDF or image"
    )


class FileLoader:
    """Resolves a file reference (URL or storage path) and reads its bytes."""

    STORAGE_MARKER = "/storage/v1/object/public/"

    def __init__(
        self,
        files_root: Path,
        bucket: str = "survey-pdfs",
        timeout_seconds: int = 30,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._files_root = files_root
        self._bucket = bucket
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    def load(self, file_ref: str) -> bytes:
        """Return the raw bytes behind a file reference.

        Storage public URLs and bare relative paths are read from
        ``{files_root}/{bucket}/{path}``; any other http(s) URL is downloaded.

        Raises:
            InvalidFileReferenceError: empty reference or path outside the root.
            FileNotFoundError: if the resolved local file does not exist.
            FileDownloadError: if the remote fetch fails.
        """
        ref = (file_ref or "").strip()
        if not ref:
            raise InvalidFileReferenceError("No file URL available")

        storage_path = self._storage_path(ref)
        if storage_path is not None:
            return self._read_local(storage_path)
        if ref.startswith(("http://", "https://")):
            return self._download(ref)
        return self._read_local(ref)

    def _storage_path(self, ref: str) -> str | None:
        prefix = f"{self.STORAGE_MARKER}{self._bucket}/"
        if prefix not in ref:
            return None
        parts = ref.split(prefix)
        if len(parts) != 2 or not parts[1]:
            raise InvalidFileReferenceError(f"Invalid file URL format: {ref}")
        return parts[1]

    def _read_local(self, relative: str) -> bytes:
        root = (self._files_root / self._bucket).resolve()
        path = (root / relative.lstrip("/")).resolve()
        if not path.is_relative_to(root):
            raise InvalidFileReferenceError(f"File reference escapes storage root: {relative}")
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return path.read_bytes()

    def _download(self, url: str) -> bytes:
        try:
            if self._http_client is not None:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, timeout=self._timeout_seconds, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FileDownloadError(
                f"Failed to download PDF: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FileDownloadError(f"Failed to download PDF: {exc}") from exc
        if not response.content:
            raise FileDownloadError("No PDF data received from storage")
        return response.content
