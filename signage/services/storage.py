import os
import hashlib
import mimetypes
import time
from fastapi import UploadFile

from signage.settings import MAX_UPLOAD_BYTES, STORAGE_DIR

CONTENT_DIR = os.path.join(STORAGE_DIR, "content")
ALLOWED_EXTENSIONS = {
    "Image": {".jpg", ".jpeg", ".png", ".webp", ".gif"},
    "Video": {".mp4", ".webm", ".mkv", ".mov"},
    "PDF": {".pdf"},
    "HTML": {".html", ".htm"},
}


def ensure_storage() -> None:
    os.makedirs(CONTENT_DIR, exist_ok=True)


def content_type_for(filename: str) -> str | None:
    _, ext = os.path.splitext(filename.lower())
    for content_type, extensions in ALLOWED_EXTENSIONS.items():
        if ext in extensions:
            return content_type
    return None


def _validate_extension(content_type: str, filename: str) -> str:
    _, ext = os.path.splitext(filename.lower())
    allowed = ALLOWED_EXTENSIONS.get(content_type)
    if allowed is None:
        raise ValueError(f"Uploads are not supported for {content_type} content")
    if ext not in allowed:
        raise ValueError(
            f"Unsupported {content_type.lower()} format. Use {'/'.join(sorted(e[1:].upper() for e in allowed))}."
        )
    return ext


def save_file(file: UploadFile, content_type: str, customer_id: int) -> dict:
    """Write an upload under the customer's folder; the returned url is served from /storage."""
    content = file.file.read()
    if not content:
        raise ValueError("Empty files cannot be uploaded.")
    size = len(content)
    if size > MAX_UPLOAD_BYTES:
        raise ValueError(f"File exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)} MB upload limit.")
    filename = os.path.basename((file.filename or "upload.bin").strip()) or "upload.bin"
    ext = _validate_extension(content_type, filename)
    checksum = hashlib.sha256(content).hexdigest()

    safe_name, _ = os.path.splitext(filename)
    safe_name = "".join(ch for ch in safe_name if ch.isalnum() or ch in {"-", "_"}).strip() or "content"
    stamped_filename = f"{safe_name}-{int(time.time() * 1000)}{ext}"
    folder = os.path.join(CONTENT_DIR, str(customer_id))
    os.makedirs(folder, exist_ok=True)
    with open(os.path.join(folder, stamped_filename), "wb") as f:
        f.write(content)

    return {
        "file_url": f"/storage/content/{customer_id}/{stamped_filename}",
        "file_size": size,
        "checksum": checksum,
        "mime_type": file.content_type or mimetypes.guess_type(filename)[0],
    }


def delete_file(file_url: str | None) -> bool:
    if not file_url or not file_url.startswith("/storage/content/"):
        return False
    relative = file_url[len("/storage/"):]
    path = os.path.normpath(os.path.join(STORAGE_DIR, relative))
    if not path.startswith(os.path.normpath(CONTENT_DIR)) or not os.path.isfile(path):
        return False
    os.remove(path)
    return True
