import io
import os
import tarfile

from nativebuilder.config import BuildSettings
from nativebuilder.platform_info import PlatformInfo

SOURCE_FILES = {
    "CMakeLists.txt": "project(openjpeg C)\n",
    "src/lib/openjp2/openjpeg.h": "#define OPJ_VERSION 2\n",
    "README.md": "OpenJPEG\n",
}


def make_source_archive(path, top_level="openjpeg-2.5.2", files=None):
    """Write a tar.gz laid out like a release tarball: everything under one top-level directory."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with tarfile.open(path, "w:gz") as tar:
        info = tarfile.TarInfo(top_level)
        info.type = tarfile.DIRTYPE
        info.mode = 0o755
        tar.addfile(info)
        for name, content in (files or SOURCE_FILES).items():
            data = content.encode()
            info = tarfile.TarInfo(f"{top_level}/{name}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


def make_settings(root, os_name="Linux", interactive=False):
    return BuildSettings(
        platform=PlatformInfo(os=os_name, arch="x86_64", jobs=4),
        source_archives=os.path.join(root, "source_archives"),
        output_root=os.path.join(root, "output"),
        interactive=interactive,
    )


def snapshot_tree(root):
    """Map of relative path to file bytes for every file below ``root``."""
    tree = {}
    for dirpath, _, files in os.walk(root):
        for name in files:
            path = os.path.join(dirpath, name)
            with open(path, "rb") as f:
                tree[os.path.relpath(path, root)] = f.read()
    return tree


def write(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        f.write(content)
