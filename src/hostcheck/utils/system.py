"""System utilities for host identification"""

import os
import getpass
import platform
import socket
from datetime import datetime

import distro


def check_root():
    """Check if running with root privileges"""
    return os.geteuid() == 0


def get_os_name():
    """Pretty OS name, e.g. 'Debian GNU/Linux 12 (bookworm)'"""
    try:
        return distro.name(pretty=True) or 'Unknown Linux'
    except (OSError, ValueError):
        return 'Unknown Linux'


def get_current_user():
    """Login name of the invoking user"""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return 'unknown'


def get_system_info():
    """Host details shown in the report header"""
    info = {}

    try:
        info['hostname'] = socket.gethostname() or 'unknown'
    except OSError:
        info['hostname'] = 'unknown'

    info['os'] = get_os_name()
    info['os_id'] = distro.id() or 'linux'
    info['kernel'] = f"{platform.system()} {platform.release()}".strip() or 'unknown'
    info['arch'] = platform.machine()
    info['user'] = get_current_user()
    info['is_root'] = check_root()
    info['timestamp'] = datetime.now().astimezone().strftime('%Y-%m-%d %H:%M:%S %Z')

    return info
