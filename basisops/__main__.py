"""
basisops module interface.

Usage:
    basisops test [--report]
    basisops bench
    basisops cov
    basisops get_config
"""

if __name__ == "__main__":

    import sys
    import pathlib
    import shutil
    from docopt import docopt
    from basisops.tools import logging
    from basisops.tests import test, bench, cov

    args = docopt(__doc__)
    if args['test']:
        sys.exit(test(report=args['--report']))
    elif args['bench']:
        sys.exit(bench())
    elif args['cov']:
        sys.exit(cov())
    elif args['get_config']:
        config_path = pathlib.Path(__file__).parent.joinpath('basisops.cfg')
        shutil.copy(str(config_path), '.')
