import os
import requests
import zipfile
import tarfile
import shutil
import contextlib
import lzma
import zlib
from ..cli_logger import logger
from ..errors import ArchiveError, DownloadError

# -------------------- Helpers: safe paths & extraction --------------------

def _safe_join(base, *paths):
    """Safely join paths, preventing path traversal attacks."""
    base = os.path.abspath(base)
    final = os.path.abspath(os.path.join(base, *paths))
    if not final.startswith(base + os.sep) and final != base:
        raise ArchiveError(f"Unsafe path detected: {final}")
    return final

def _strip_components(name, count):
    """Drop the leading ``count`` path components, like ``tar --strip-components``.

    Returns None when nothing is left.
    """
    parts = [p for p in name.replace("\\", "/").split("/") if p and p != "."]
    if len(parts) <= count:
        return None
    return "/".join(parts[count:])

def _safe_extract_zip(zip_ref: zipfile.ZipFile, dest_dir: str, strip_components=0, log_each=False):
    """Safely extract a zip file, preventing zip slip attacks."""
    for member in zip_ref.infolist():
        relative = _strip_components(member.filename, strip_components)
        if relative is None:
            continue
        target_path = _safe_join(dest_dir, relative)
        if member.is_dir():
            if log_each:
                logger.step_info(f"creating: {relative}", indent=3)
            os.makedirs(target_path, exist_ok=True)
            continue
        os.makedirs(os.path.dirname(target_path), exist_ok=True)
        if log_each:
            logger.step_info(f"extracting: {relative}", indent=2)
        with zip_ref.open(member, 'r') as src, open(target_path, 'wb') as out:
            shutil.copyfileobj(src, out)
        # Preserve file permissions
        mode = member.external_attr >> 16
        if mode:
            os.chmod(target_path, mode & 0o7777)

def _read_to_end(tar_ref: tarfile.TarFile):
    """Decompress the rest of the stream so damaged data fails its checksum.

    A bad header past the first member only ends member listing, it is not an error.
    """
    while tar_ref.fileobj.read(1 << 20):
        pass

def _safe_extract_tar(tar_ref: tarfile.TarFile, dest_dir: str, strip_components=0, log_each=False):
    """Safely extract a tar file, preventing path traversal attacks."""
    members = tar_ref.getmembers()
    _read_to_end(tar_ref)
    for member in members:
        relative = _strip_components(member.name, strip_components)
        if relative is None:
            continue
        member_path = _safe_join(dest_dir, relative)
        if member.isdir():
            if log_each:
                logger.step_info(f"creating: {relative}", indent=3)
            os.makedirs(member_path, exist_ok=True)
            continue
        # ensure parent exists
        os.makedirs(os.path.dirname(member_path), exist_ok=True)
        if log_each:
            logger.step_info(f"extracting: {relative}", indent=2)

        if member.issym():
            # the link target must stay inside the destination
            _safe_join(dest_dir, os.path.dirname(relative), member.linkname)
            if os.path.lexists(member_path):
                os.remove(member_path)
            os.symlink(member.linkname, member_path)
            continue
        if member.islnk():
            link_source = _strip_components(member.linkname, strip_components)
            if link_source is None:
                raise ArchiveError(f"Hard link {member.name} points outside the archive root")
            shutil.copy2(_safe_join(dest_dir, link_source), member_path)
            continue

        src = tar_ref.extractfile(member)
        if src is None:
            # devices, fifos: nothing a source tree needs
            continue
        with src as src_file:
            with open(member_path, "wb") as out:
                shutil.copyfileobj(src_file, out)
        # Preserve file permissions
        if member.mode:
            os.chmod(member_path, member.mode & 0o7777)


def extract(filepath, dest_dir, strip_components=0, log_each=False):
    """Extracts an archive file to a destination directory.

    Raises:
        ArchiveError: The archive is missing, corrupt or of an unsupported type.
    """
    if not os.path.isfile(filepath):
        raise ArchiveError(f"Archive not found: {filepath}")
    os.makedirs(dest_dir, exist_ok=True)
    filename = os.path.basename(filepath)

    try:
        if tarfile.is_tarfile(filepath):
            with tarfile.open(filepath, 'r:*') as tar:
                _safe_extract_tar(tar, dest_dir, strip_components, log_each)
        elif zipfile.is_zipfile(filepath):
            with zipfile.ZipFile(filepath, 'r') as zip_ref:
                _safe_extract_zip(zip_ref, dest_dir, strip_components, log_each)
        else:
            raise ArchiveError(f"Unsupported or corrupt archive: {filename}")
    except (zipfile.BadZipFile, tarfile.TarError, zlib.error, lzma.LZMAError, EOFError, OSError) as e:
        raise ArchiveError(f"Error extracting {filename}: {e}") from e

    logger.success(f"Successfully extracted {filename} to {dest_dir}")
    return dest_dir

# -------------------- Download --------------------

def download(url, filepath, timeout=60):
    """Download ``url`` to ``filepath`` through a temporary file.

    Raises:
        DownloadError: The request failed.
    """
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    filename = os.path.basename(filepath)
    temp_filepath = filepath + ".tmp"

    try:
        with requests.get(url, stream=True, timeout=timeout) as r:
            r.raise_for_status()
            total_size = int(r.headers.get('content-length', 0))

            with open(temp_filepath, 'wb') as f:
                chunks = logger.progress(
                    r.iter_content(chunk_size=1024 * 256),  # 256KB chunks
                    description=f"Downloading {filename}",
                    total=total_size,
                )
                for chunk in chunks:
                    if chunk:  # keep-alive chunks may be empty
                        f.write(chunk)

        # Atomic rename
        os.replace(temp_filepath, filepath)
        return filepath

    except requests.exceptions.RequestException as e:
        with contextlib.suppress(OSError):
            if os.path.exists(temp_filepath):
                os.remove(temp_filepath)
        raise DownloadError(f"Error downloading {url}: {e}") from e
