import os
import tempfile
import unittest
from unittest.mock import patch

from nativebuilder.errors import ConfigError, OSReleaseError, UnsupportedPlatformError
from nativebuilder.platform_info import detect_linux_release, detect_platform


class TestDetectPlatform(unittest.TestCase):

    @patch('nativebuilder.platform_info.logger')
    @patch('platform.machine', return_value='x86_64')
    @patch('platform.system', return_value='Linux')
    def test_detects_linux(self, mock_system, mock_machine, mock_logger):
        info = detect_platform(jobs=3)
        self.assertEqual(info.os, 'Linux')
        self.assertEqual(info.arch, 'x86_64')
        self.assertEqual(info.jobs, 3)
        self.assertTrue(info.is_linux)
        self.assertFalse(info.is_darwin)

    @patch('nativebuilder.platform_info.logger')
    @patch('platform.machine', return_value='arm64')
    @patch('platform.system', return_value='Linux')
    def test_override_is_case_insensitive(self, mock_system, mock_machine, mock_logger):
        info = detect_platform(os_override='darwin', jobs=1)
        self.assertEqual(info.os, 'Darwin')

    @patch('nativebuilder.platform_info.logger')
    @patch('platform.system', return_value='Windows')
    def test_unsupported_os_fails(self, mock_system, mock_logger):
        with self.assertRaises(UnsupportedPlatformError):
            detect_platform()

    @patch('nativebuilder.platform_info.logger')
    @patch('os.cpu_count', return_value=None)
    @patch('platform.system', return_value='Darwin')
    def test_jobs_default_to_one_without_cpu_count(self, mock_system, mock_cpu_count, mock_logger):
        self.assertEqual(detect_platform().jobs, 1)

    @patch('nativebuilder.platform_info.logger')
    @patch('platform.system', return_value='Linux')
    def test_rejects_zero_jobs(self, mock_system, mock_logger):
        with self.assertRaises(ConfigError):
            detect_platform(jobs=0)


class TestDetectLinuxRelease(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.os_release = os.path.join(self.tmp.name, 'os-release')

    def tearDown(self):
        self.tmp.cleanup()

    @patch('platform.system', return_value='Linux')
    def test_reads_version_id(self, mock_system):
        with open(self.os_release, 'w') as f:
            f.write('NAME="Ubuntu"\nVERSION_ID="22.04"\nID=ubuntu\n')
        self.assertEqual(detect_linux_release(self.os_release), '22.04')

    @patch('platform.system', return_value='Linux')
    def test_missing_version_id(self, mock_system):
        with open(self.os_release, 'w') as f:
            f.write('NAME="Arch Linux"\n')
        self.assertEqual(detect_linux_release(self.os_release), 'unknown')

    @patch('platform.system', return_value='Linux')
    def test_unreadable_descriptor(self, mock_system):
        with self.assertRaises(OSReleaseError):
            detect_linux_release(os.path.join(self.tmp.name, 'missing'))

    @patch('platform.system', return_value='Darwin')
    def test_requires_linux(self, mock_system):
        with self.assertRaises(UnsupportedPlatformError):
            detect_linux_release(self.os_release)


if __name__ == '__main__':
    unittest.main()
