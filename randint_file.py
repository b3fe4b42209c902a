import dataclasses
import logging
import random
import re
import struct
import sys
from typing import Iterator, List, Optional

import colorama

logger = logging.getLogger()

# Values are drawn from [0, ULIMIT)
ULIMIT = 1000000

BYTES_PER_INT = 4
MIB = 1024 * 1024

# Integers per read() or write() call
CHUNK_INTS = 64 * 1024

INT32_MAX = (1 << 31) - 1

# Little-endian signed 32-bit
_INT32 = struct.Struct("<i")

_ATOI_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class RandomIntFileError(RuntimeError):
  pass

class UsageError(RandomIntFileError):
  pass

class FileOpenError(RandomIntFileError):
  def __init__(self, path: str, err: OSError):
    super().__init__(f"Error opening file: {path} ({err.strerror or err})")
    self.path = path
    self.err = err

class HeaderOverflowError(RandomIntFileError):
  pass

class FileFormatError(RandomIntFileError):
  pass

@dataclasses.dataclass
class GenerationRequest:
  file_path: str
  size_mib: int
  include_header: bool = True
  seed: Optional[int] = None

@dataclasses.dataclass
class FileSummary:
  path: str
  has_header: bool
  header: Optional[int]
  count: int
  minimum: Optional[int]
  maximum: Optional[int]

class ProgressBar:
  bar_string_fmt = "\rProgress: [{}{}] {:.2%} {}/{}"
  cnt = 0

  def __init__(self, total, bar_total=30, stream=None):
    self.total = total
    self.bar_total = bar_total
    self.stream = stream if stream is not None else sys.stderr

  def update(self, step=1, value=None):
    total = self.total
    if (value is None):
      self.cnt += step
    else:
      self.cnt = value

    # an empty payload is complete from the start
    percent = self.cnt/total if total > 0 else 1.0
    bar_cnt = int(percent*self.bar_total)
    space_cnt = self.bar_total - bar_cnt

    progress = self.bar_string_fmt.format(
      "█" * bar_cnt,
      " " * space_cnt,
      percent,
      self.cnt,
      total
    )

    print(colorama.Style.NORMAL + colorama.Fore.YELLOW + progress, end="    ", file=self.stream)

    if percent >= 1:
      print(colorama.Style.RESET_ALL + colorama.Fore.RESET, file=self.stream)

def parse_size(text: str) -> int:
  """Parse a size argument the way C atoi() does.

  Leading whitespace and an optional sign are accepted, trailing garbage is
  ignored and text without any leading digits yields 0.
  """
  m = _ATOI_RE.match(text)
  if m is None:
    return 0
  return int(m.group(1))

def int_count(size_mib: int) -> int:
  # negative sizes degrade to an empty payload
  return max(0, (size_mib * MIB) // BYTES_PER_INT)

def pack_int32(value: int) -> bytes:
  return _INT32.pack(value)

def unpack_int32(data: bytes) -> int:
  return _INT32.unpack(data)[0]

def random_ints(count: int, rng: random.Random) -> Iterator[int]:
  for _ in range(count):
    yield rng.randrange(ULIMIT)

def _pack_chunk(values: List[int]) -> bytes:
  return struct.pack(f"<{len(values)}i", *values)

def write_random_int_file(
  request: GenerationRequest,
  progress: Optional[ProgressBar] = None,
) -> int:
  """Write ``int_count(request.size_mib)`` random integers to the file.

  Returns the number of payload integers written.
  """
  n = int_count(request.size_mib)

  if request.include_header and n > INT32_MAX:
    raise HeaderOverflowError(
      f"{request.size_mib} MiB needs {n} integers, the count header holds at most {INT32_MAX}"
    )

  try:
    fout = open(request.file_path, "wb")
  except OSError as err:
    raise FileOpenError(request.file_path, err) from err

  rng = random.Random(request.seed)
  logger.debug("Writing %d integers to %s (header: %s)", n, request.file_path, request.include_header)

  with fout:
    if request.include_header:
      fout.write(pack_int32(n))

    written = 0
    values = random_ints(n, rng)
    while written < n:
      chunk_size = min(CHUNK_INTS, n - written)
      chunk = [next(values) for _ in range(chunk_size)]
      fout.write(_pack_chunk(chunk))
      written += chunk_size

      logger.debug("Wrote %d integers (total: %d)", chunk_size, written)
      if progress is not None:
        progress.update(value=written)

    if progress is not None and n == 0:
      progress.update(value=0)

  return n

def read_random_int_file(path: str, include_header: bool = True) -> FileSummary:
  try:
    fin = open(path, "rb")
  except OSError as err:
    raise FileOpenError(path, err) from err

  header = None
  count = 0
  minimum = None
  maximum = None

  with fin:
    if include_header:
      data = fin.read(BYTES_PER_INT)
      if len(data) < BYTES_PER_INT:
        raise FileFormatError(f"{path}: missing count header")
      header = unpack_int32(data)

    while True:
      data = fin.read(CHUNK_INTS * BYTES_PER_INT)
      if not data:
        break
      if len(data) % BYTES_PER_INT != 0:
        raise FileFormatError(f"{path}: trailing {len(data) % BYTES_PER_INT} bytes after the last integer")

      values = struct.unpack(f"<{len(data) // BYTES_PER_INT}i", data)
      count += len(values)
      lo, hi = min(values), max(values)
      minimum = lo if minimum is None else min(minimum, lo)
      maximum = hi if maximum is None else max(maximum, hi)

  if header is not None and header != count:
    raise FileFormatError(f"{path}: header says {header} integers, found {count}")

  return FileSummary(
    path=path,
    has_header=include_header,
    header=header,
    count=count,
    minimum=minimum,
    maximum=maximum,
  )
