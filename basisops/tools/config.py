"""
Configuration handling.

"""

from configparser import ConfigParser
import os


# Create config
config = ConfigParser()

# Read defaults, user, and local files
config.read(os.path.join(os.path.dirname(__file__), '..', 'basisops.cfg'))
config.read(os.path.expanduser('~/.basisops/basisops.cfg'))
config.read('basisops.cfg')
