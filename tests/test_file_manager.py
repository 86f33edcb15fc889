import gzip
import io
import os
import random
import tarfile
import tempfile
import unittest
import zipfile
from unittest.mock import patch, MagicMock

import requests

from nativebuilder.errors import ArchiveError, DownloadError
from nativebuilder.utils import extract, download
from nativebuilder.utils.file_manager import _safe_join, _strip_components
from tests.helpers import make_source_archive


class TestFileManagerHelpers(unittest.TestCase):

    def test_safe_join(self):
        base = '/tmp'
        self.assertEqual(_safe_join(base, 'foo', 'bar'), '/tmp/foo/bar')
        with self.assertRaises(ArchiveError):
            _safe_join(base, '../foo')

    def test_strip_components(self):
        self.assertEqual(_strip_components('openjpeg-2.5.2/src/lib/a.c', 1), 'src/lib/a.c')
        self.assertEqual(_strip_components('./openjpeg-2.5.2/CMakeLists.txt', 1), 'CMakeLists.txt')
        self.assertIsNone(_strip_components('openjpeg-2.5.2/', 1))
        self.assertIsNone(_strip_components('pax_global_header', 1))
        self.assertEqual(_strip_components('a/b', 0), 'a/b')


@patch('nativebuilder.utils.file_manager.logger')
class TestExtract(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dest = os.path.join(self.tmp.name, 'dest')

    def tearDown(self):
        self.tmp.cleanup()

    def test_extract_tar_strips_top_level(self, mock_logger):
        archive = make_source_archive(os.path.join(self.tmp.name, 'lib.tar.gz'))
        extract(archive, self.dest, strip_components=1)

        self.assertTrue(os.path.isfile(os.path.join(self.dest, 'CMakeLists.txt')))
        self.assertTrue(os.path.isfile(os.path.join(self.dest, 'src', 'lib', 'openjp2', 'openjpeg.h')))
        self.assertFalse(os.path.exists(os.path.join(self.dest, 'openjpeg-2.5.2')))
        # the archive is kept for the next build
        self.assertTrue(os.path.exists(archive))

    def test_extract_zip_strips_top_level(self, mock_logger):
        archive = os.path.join(self.tmp.name, 'lib.zip')
        with zipfile.ZipFile(archive, 'w') as zf:
            zf.writestr('openjpeg-2.5.2/', '')
            zf.writestr('openjpeg-2.5.2/CMakeLists.txt', 'project(openjpeg C)\n')
        extract(archive, self.dest, strip_components=1)
        with open(os.path.join(self.dest, 'CMakeLists.txt')) as f:
            self.assertEqual(f.read(), 'project(openjpeg C)\n')

    def test_extract_tar_symlink(self, mock_logger):
        archive = os.path.join(self.tmp.name, 'links.tar')
        with tarfile.open(archive, 'w') as tar:
            data = b'header'
            info = tarfile.TarInfo('top/real.h')
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
            link = tarfile.TarInfo('top/alias.h')
            link.type = tarfile.SYMTYPE
            link.linkname = 'real.h'
            tar.addfile(link)
        extract(archive, self.dest, strip_components=1)
        self.assertTrue(os.path.islink(os.path.join(self.dest, 'alias.h')))
        with open(os.path.join(self.dest, 'alias.h'), 'rb') as f:
            self.assertEqual(f.read(), b'header')

    def test_rejects_path_traversal(self, mock_logger):
        archive = os.path.join(self.tmp.name, 'evil.tar')
        with tarfile.open(archive, 'w') as tar:
            data = b'x'
            info = tarfile.TarInfo('top/../../escape.txt')
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        with self.assertRaises(ArchiveError):
            extract(archive, self.dest, strip_components=1)
        self.assertFalse(os.path.exists(os.path.join(self.tmp.name, 'escape.txt')))

    def test_rejects_escaping_symlink(self, mock_logger):
        archive = os.path.join(self.tmp.name, 'evil-link.tar')
        with tarfile.open(archive, 'w') as tar:
            link = tarfile.TarInfo('top/passwd')
            link.type = tarfile.SYMTYPE
            link.linkname = '../../../etc/passwd'
            tar.addfile(link)
        with self.assertRaises(ArchiveError):
            extract(archive, self.dest, strip_components=1)

    def test_missing_archive(self, mock_logger):
        with self.assertRaises(ArchiveError):
            extract(os.path.join(self.tmp.name, 'missing.tar.gz'), self.dest)

    def test_corrupt_archive(self, mock_logger):
        archive = os.path.join(self.tmp.name, 'corrupt.tar.gz')
        with open(archive, 'wb') as f:
            f.write(b'this is not an archive')
        with self.assertRaises(ArchiveError):
            extract(archive, self.dest)

    def test_truncated_archive(self, mock_logger):
        archive = make_source_archive(os.path.join(self.tmp.name, 'lib.tar.gz'))
        with open(archive, 'rb') as f:
            data = f.read()
        with open(archive, 'wb') as f:
            f.write(data[:40])
        with self.assertRaises(ArchiveError):
            extract(archive, self.dest, strip_components=1)

    def test_damaged_gzip_stream(self, mock_logger):
        raw = io.BytesIO()
        with tarfile.open(fileobj=raw, mode='w') as tar:
            for index in range(40):
                data = random.Random(index).randbytes(4096)
                info = tarfile.TarInfo(f'top/file{index:02d}.bin')
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
        data = bytearray(gzip.compress(raw.getvalue()))
        middle = len(data) // 2
        for offset in range(middle, middle + 64):
            data[offset] ^= 0xFF
        archive = os.path.join(self.tmp.name, 'damaged.tar.gz')
        with open(archive, 'wb') as f:
            f.write(bytes(data))

        self.assertTrue(tarfile.is_tarfile(archive))
        with self.assertRaises(ArchiveError):
            extract(archive, self.dest, strip_components=1)
        self.assertEqual(os.listdir(self.dest), [])


class TestDownload(unittest.TestCase):

    @patch('nativebuilder.utils.file_manager.logger')
    @patch('requests.get')
    @patch('os.replace')
    @patch('os.makedirs')
    def test_download(self, mock_makedirs, mock_replace, mock_requests_get, mock_logger):
        mock_response = MagicMock()
        mock_response.iter_content.return_value = [b'test']
        mock_response.headers.get.return_value = '4'
        mock_requests_get.return_value.__enter__.return_value = mock_response
        mock_logger.progress.side_effect = lambda chunks, **kwargs: chunks

        with patch('builtins.open', unittest.mock.mock_open()) as mock_open:
            path = download('http://test.com/libopenjp2.tar.gz', '/tmp/archives/libopenjp2.tar.gz')
            mock_open.assert_called_with('/tmp/archives/libopenjp2.tar.gz.tmp', 'wb')
            mock_open().write.assert_called_once_with(b'test')
        mock_replace.assert_called_with('/tmp/archives/libopenjp2.tar.gz.tmp', '/tmp/archives/libopenjp2.tar.gz')
        self.assertEqual(path, '/tmp/archives/libopenjp2.tar.gz')

    @patch('nativebuilder.utils.file_manager.logger')
    @patch('requests.get', side_effect=requests.exceptions.ConnectionError("offline"))
    def test_download_failure(self, mock_requests_get, mock_logger):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(DownloadError):
                download('http://test.com/libopenjp2.tar.gz', os.path.join(tmp, 'libopenjp2.tar.gz'))
            self.assertEqual(os.listdir(tmp), [])


if __name__ == '__main__':
    unittest.main()
