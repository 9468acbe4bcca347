#!/usr/bin/env python3
"""
gen_bindings.py - embind binding generator entry point

Generates the C++ embind layer and the TypeScript API for all configured
classes.

Usage:
    python scripts/gen_bindings.py [--source-root PATH] [--output-root PATH] [--clang PATH] [-v]
"""

import argparse
import logging
import os
import sys

# Get paths
script_dir = os.path.dirname(os.path.abspath(__file__))
root_dir = os.path.abspath(os.path.join(script_dir, '..'))

# Add scripts directory to path
if script_dir not in sys.path:
    sys.path.insert(0, script_dir)

from embind_gen import BindgenError, Generator, DEFAULT_COMPILERS
from bindings import jsbsim

logger = logging.getLogger('gen_bindings')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate embind bindings and TypeScript API')
    parser.add_argument('--source-root', default=os.path.join(root_dir, 'vendor/jsbsim/src'),
                        help='Path to the JSBSim source tree (for headers)')
    parser.add_argument('--output-root', default=root_dir,
                        help='Directory the generated files are written under')
    parser.add_argument('--clang', default=None,
                        help='clang++ executable tried before the defaults')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log compiler invocations and enum resolution')
    return parser.parse_args(argv)


def compiler_candidates(explicit=None) -> list[str]:
    """--clang first, then CLANGPP, then the defaults"""
    candidates = []
    for compiler in (explicit, os.environ.get('CLANGPP')):
        if compiler and compiler not in candidates:
            candidates.append(compiler)
    for compiler in DEFAULT_COMPILERS:
        if compiler not in candidates:
            candidates.append(compiler)
    return candidates


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    gen = Generator(
        source_root=args.source_root,
        output_root=args.output_root,
        compilers=compiler_candidates(args.clang),
    )

    # Apply JSBSim-specific configuration
    jsbsim.configure(gen)

    try:
        gen.generate_all()
    except BindgenError as e:
        logger.error('%s', e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
