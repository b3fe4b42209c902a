import argparse
import logging
import sys
from typing import List, Optional

import _version
from randint_file import (
  FileFormatError,
  FileOpenError,
  GenerationRequest,
  HeaderOverflowError,
  ProgressBar,
  ULIMIT,
  UsageError,
  int_count,
  parse_size,
  read_random_int_file,
  write_random_int_file,
)

logger = logging.getLogger()

USAGE_ARGS = "<fileName> <IntendedFileSize (MBs)>"


class _ArgumentParser(argparse.ArgumentParser):
  def error(self, message):
    raise UsageError(message)

def build_parser(prog: Optional[str] = None, include_header: bool = True) -> argparse.ArgumentParser:
  if include_header:
    description = "write random 32-bit integers to a binary file, preceded by their count"
  else:
    description = "write random 32-bit integers to a binary file"

  parser = _ArgumentParser(prog=prog, description=description)
  parser.add_argument(
    "args",
    metavar="fileName IntendedFileSize",
    help="output file and its intended size in MiB",
    nargs="*",
  )
  parser.add_argument(
    "-s",
    "--seed",
    dest="seed",
    help="Seed the random number generator for reproducible output",
    required=False,
    type=lambda x: int(x,0),
    default=None,
  )
  parser.add_argument(
    "-p",
    "--progress",
    dest="progress",
    help="Show a progress bar on stderr",
    action="store_true",
    default=False,
  )
  parser.add_argument(
    "-c",
    "--check",
    dest="check",
    help="Verify an existing file instead of writing one",
    action="store_true",
    default=False,
  )
  parser.add_argument(
    "-v",
    "--verbose",
    dest="verbose",
    help="Print verbose debug statements",
    action="store_true",
    default=False,
  )
  parser.add_argument(
    "-V",
    "--version",
    dest="version",
    help="Print the version number",
    action="store_true",
    default=False,
  )
  return parser

def check(file_name: str, size_mib: int, include_header: bool) -> int:
  summary = read_random_int_file(file_name, include_header=include_header)
  expected = int_count(size_mib)

  if summary.count != expected:
    raise FileFormatError(f"{file_name}: expected {expected} integers, found {summary.count}")

  if summary.count and not (0 <= summary.minimum and summary.maximum < ULIMIT):
    raise FileFormatError(
      f"{file_name}: values out of range [{summary.minimum}, {summary.maximum}]"
    )

  logger.info("%s: %d integers in [%s, %s], header = %s",
              file_name, summary.count, summary.minimum, summary.maximum, summary.header)
  return 0

def main(argv: Optional[List[str]] = None, include_header: bool = True) -> int:
  prog = sys.argv[0]
  parser = build_parser(prog=prog, include_header=include_header)

  try:
    args = parser.parse_intermixed_args(argv)
    if args.version:
      print(f"{parser.prog} version {_version.__version__}")
      return 0
    if len(args.args) != 2:
      raise UsageError(f"expected 2 arguments, got {len(args.args)}")
  except UsageError as err:
    print(f"Usage: {parser.prog} {USAGE_ARGS}", file=sys.stderr)
    logger.debug("usage error: %s", err)
    return 1

  level = logging.DEBUG if args.verbose else logging.INFO
  logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
  logger.setLevel(level)

  file_name, size_arg = args.args
  size_mib = parse_size(size_arg)

  if args.verbose:
    logger.debug("file_name = %s", file_name)
    logger.debug("size_mib = %d", size_mib)
    logger.debug("include_header = %s", include_header)
    logger.debug("seed = %s", args.seed)

  try:
    if args.check:
      return check(file_name, size_mib, include_header)

    request = GenerationRequest(
      file_path=file_name,
      size_mib=size_mib,
      include_header=include_header,
      seed=args.seed,
    )
    progressbar = None
    if args.progress:
      progressbar = ProgressBar(total=int_count(size_mib), bar_total=30)

    write_random_int_file(request, progress=progressbar)
    return 0
  except FileOpenError as err:
    if args.check:
      logger.error("check failed: %s", err)
    else :
      logger.error("%s: %s", parser.prog, err)
    return 1
  except (
    HeaderOverflowError,
    FileFormatError,
  ) as err:
    if args.check:
      logger.error("check failed: %s", repr(err))
    else :
      logger.error("generate failed: %s", repr(err))
    return 1

def main_raw(argv: Optional[List[str]] = None) -> int:
  return main(argv, include_header=False)

def run() -> None:
  sys.exit(main())

def run_raw() -> None:
  sys.exit(main_raw())

if __name__ == '__main__':
  run()
