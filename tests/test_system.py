"""
Tests for system utilities (privilege detection, system info).

Run: python3 -m pytest tests/test_system.py -v
"""

import socket
from unittest.mock import patch

from hostcheck.utils.system import check_root, get_current_user, get_os_name, get_system_info


class TestCheckRoot:
    """Tests for check_root function."""

    def test_root_when_euid_zero(self):
        """Test returns True when effective UID is 0."""
        with patch('os.geteuid', return_value=0):
            assert check_root() is True

    def test_not_root_when_euid_nonzero(self):
        """Test returns False when effective UID is not 0."""
        with patch('os.geteuid', return_value=1000):
            assert check_root() is False


class TestOsName:
    """Tests for distro-based OS naming."""

    def test_pretty_name(self):
        with patch('distro.name', return_value='Debian GNU/Linux 12 (bookworm)'):
            assert get_os_name() == 'Debian GNU/Linux 12 (bookworm)'

    def test_empty_name(self):
        with patch('distro.name', return_value=''):
            assert get_os_name() == 'Unknown Linux'

    def test_os_release_unreadable(self):
        with patch('distro.name', side_effect=OSError("no os-release")):
            assert get_os_name() == 'Unknown Linux'


class TestCurrentUser:
    """Tests for get_current_user."""

    def test_user(self):
        with patch('getpass.getuser', return_value='alice'):
            assert get_current_user() == 'alice'

    def test_no_passwd_entry(self):
        with patch('getpass.getuser', side_effect=KeyError('uid not found')):
            assert get_current_user() == 'unknown'


class TestGetSystemInfo:
    """Tests for get_system_info function."""

    def test_returns_dict_with_keys(self):
        """Test returns dictionary with expected keys."""
        info = get_system_info()
        for key in ('hostname', 'os', 'os_id', 'kernel', 'arch', 'user', 'is_root', 'timestamp'):
            assert key in info

    def test_hostname_failure(self):
        with patch('socket.gethostname', side_effect=OSError):
            assert get_system_info()['hostname'] == 'unknown'

    def test_root_flag(self):
        with patch('os.geteuid', return_value=0):
            assert get_system_info()['is_root'] is True

    def test_hostname(self):
        assert get_system_info()['hostname'] == (socket.gethostname() or 'unknown')
