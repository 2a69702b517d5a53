import sys

from adwsus_recon.main import cli

sys.exit(cli())
