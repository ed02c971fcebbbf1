"""CSAFE standard frame encoding and decoding.

Frame layout:
    [0xF1][stuffed(contents + checksum)][0xF2]

- checksum: XOR of every contents byte (flags excluded)
- stuffing: 0xF0-0xF3 inside the frame are sent as 0xF3 0x00-0x03
- contents: a sequence of commands. Short commands (0x80-0xFF) are the
  opcode alone; long commands (0x00-0x7F) are [opcode][byte_count][params].

Responses use the same framing; contents are [status][responses...] where
every response carries a byte count: [opcode][byte_count][data].
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..exceptions import FormatError, InvalidResponseError
from ..models.enums import CsafeFrameStatus, CsafeMachineState

EXT_START = 0xF0
STD_START = 0xF1
STOP = 0xF2
STUFF = 0xF3

SHORT_COMMAND_MIN = 0x80
MAX_PARAM_LENGTH = 0xFF

# start + (at least one content byte) + checksum + stop
MIN_FRAME_LENGTH = 4
# start + status + checksum + stop
MIN_RESPONSE_LENGTH = 4

_STUFF_SELECTORS = {EXT_START: 0x00, STD_START: 0x01, STOP: 0x02, STUFF: 0x03}
_UNSTUFF_SELECTORS = {v: k for k, v in _STUFF_SELECTORS.items()}


def xor_checksum(contents: bytes) -> int:
    """Byte-by-byte XOR of frame contents."""
    checksum = 0
    for byte in contents:
        checksum ^= byte
    return checksum


def byte_stuff(payload: bytes) -> bytes:
    """Escape flag values (0xF0-0xF3) as 0xF3 followed by a selector."""
    out = bytearray()
    for byte in payload:
        selector = _STUFF_SELECTORS.get(byte)
        if selector is None:
            out.append(byte)
        else:
            out += bytes([STUFF, selector])
    return bytes(out)


def byte_unstuff(payload: bytes) -> bytes:
    """Reverse of byte_stuff().

    Raises:
        InvalidResponseError: On a truncated or unknown escape sequence
    """
    out = bytearray()
    i = 0
    while i < len(payload):
        byte = payload[i]
        if byte != STUFF:
            out.append(byte)
            i += 1
            continue
        if i + 1 >= len(payload):
            raise InvalidResponseError("CSAFE unstuff: truncated escape sequence")
        selector = payload[i + 1]
        if selector not in _UNSTUFF_SELECTORS:
            raise InvalidResponseError(f"CSAFE unstuff: invalid selector 0x{selector:02x}")
        out.append(_UNSTUFF_SELECTORS[selector])
        i += 2
    return bytes(out)


def is_short_command(opcode: int) -> bool:
    """Short commands carry no byte count and no parameters."""
    return opcode >= SHORT_COMMAND_MIN


@dataclass(frozen=True, slots=True)
class CsafeCommand:
    """One CSAFE command: opcode plus parameter bytes."""

    opcode: int
    params: bytes = b""

    def __post_init__(self) -> None:
        if not 0 <= self.opcode <= 0xFF:
            raise ValueError(f"opcode out of range: {self.opcode} (must be 0-255)")
        if is_short_command(self.opcode):
            if self.params:
                raise ValueError(f"Short command 0x{self.opcode:02x} takes no parameters")
        elif not self.params:
            raise ValueError(f"Long command 0x{self.opcode:02x} requires parameters")
        elif len(self.params) > MAX_PARAM_LENGTH:
            raise ValueError(
                f"Parameters too long: {len(self.params)} bytes (max {MAX_PARAM_LENGTH})"
            )

    def to_bytes(self) -> bytes:
        """Serialize to frame contents (unstuffed, no checksum)."""
        if is_short_command(self.opcode):
            return bytes([self.opcode])
        return bytes([self.opcode, len(self.params)]) + self.params

    @classmethod
    def wrap(cls, wrapper: int, *commands: CsafeCommand) -> CsafeCommand:
        """Nest commands inside a PM proprietary wrapper command."""
        return cls(wrapper, encode_commands(commands))

    def unwrap(self) -> list[CsafeCommand]:
        """Parse this command's parameters as nested commands."""
        return decode_commands(self.params)


@dataclass(frozen=True, slots=True)
class CsafeCommandResponse:
    """Response to one command: echoed opcode and its data bytes."""

    opcode: int
    data: bytes

    def unwrap(self) -> list[CsafeCommandResponse]:
        """Parse a wrapper response's data as nested responses."""
        return _decode_responses(self.data)


@dataclass(frozen=True, slots=True)
class CsafeResponse:
    """Parsed CSAFE response frame."""

    status: int
    responses: tuple[CsafeCommandResponse, ...]

    @property
    def machine_state(self) -> CsafeMachineState | int:
        state = self.status & 0x0F
        try:
            return CsafeMachineState(state)
        except ValueError:
            return state

    @property
    def previous_frame_status(self) -> CsafeFrameStatus:
        return CsafeFrameStatus((self.status >> 4) & 0x03)

    @property
    def frame_toggle(self) -> bool:
        return bool(self.status & 0x80)

    def get(self, opcode: int) -> CsafeCommandResponse | None:
        """Return the first response for opcode, searching inside wrappers."""
        for response in self.responses:
            if response.opcode == opcode:
                return response
        for response in self.responses:
            if not is_short_command(response.opcode):
                try:
                    nested = response.unwrap()
                except FormatError:
                    continue
                for inner in nested:
                    if inner.opcode == opcode:
                        return inner
        return None


def encode_commands(commands: Iterable[CsafeCommand]) -> bytes:
    """Concatenate commands into frame contents."""
    return b"".join(command.to_bytes() for command in commands)


def decode_commands(contents: bytes) -> list[CsafeCommand]:
    """Split frame contents back into commands.

    Raises:
        FormatError: If a long command's byte count overruns the contents
        InvalidResponseError: If a long command has an empty parameter block
    """
    commands: list[CsafeCommand] = []
    i = 0
    while i < len(contents):
        opcode = contents[i]
        if is_short_command(opcode):
            commands.append(CsafeCommand(opcode))
            i += 1
            continue
        if i + 2 > len(contents):
            raise FormatError(i + 2, len(contents), what="CSAFE command")
        count = contents[i + 1]
        if count == 0:
            raise InvalidResponseError(f"Long command 0x{opcode:02x} with empty parameter block")
        end = i + 2 + count
        if end > len(contents):
            raise FormatError(end, len(contents), what="CSAFE command")
        commands.append(CsafeCommand(opcode, bytes(contents[i + 2:end])))
        i = end
    return commands


def _decode_responses(payload: bytes) -> list[CsafeCommandResponse]:
    responses: list[CsafeCommandResponse] = []
    i = 0
    while i < len(payload):
        if i + 2 > len(payload):
            raise FormatError(i + 2, len(payload), what="CSAFE response")
        opcode = payload[i]
        count = payload[i + 1]
        end = i + 2 + count
        if end > len(payload):
            raise FormatError(end, len(payload), what="CSAFE response")
        responses.append(CsafeCommandResponse(opcode, bytes(payload[i + 2:end])))
        i = end
    return responses


def frame_contents(contents: bytes) -> bytes:
    """Wrap raw contents into a standard frame."""
    checksum = xor_checksum(contents)
    stuffed = byte_stuff(contents + bytes([checksum]))
    return bytes([STD_START]) + stuffed + bytes([STOP])


def build_frame(commands: Iterable[CsafeCommand]) -> bytes:
    """Build a standard frame carrying the given commands.

    Raises:
        ValueError: If no commands are given
    """
    contents = encode_commands(commands)
    if not contents:
        raise ValueError("CSAFE frame needs at least one command")
    return frame_contents(contents)


def unframe(frame: bytes, min_length: int = MIN_FRAME_LENGTH) -> bytes:
    """Validate a standard frame and return its contents (checksum removed).

    Raises:
        FormatError: If the frame is shorter than min_length
        InvalidResponseError: On wrong flags, bad escapes or checksum mismatch
    """
    if len(frame) < min_length:
        raise FormatError(min_length, len(frame), what="CSAFE frame")

    if frame[0] != STD_START or frame[-1] != STOP:
        raise InvalidResponseError(f"Not a CSAFE standard frame: {bytes(frame).hex()}")

    unstuffed = byte_unstuff(frame[1:-1])
    if len(unstuffed) < min_length - 2:
        raise FormatError(min_length - 2, len(unstuffed), what="CSAFE frame contents")

    contents, checksum = unstuffed[:-1], unstuffed[-1]
    expected = xor_checksum(contents)
    if expected != checksum:
        raise InvalidResponseError(
            f"CSAFE checksum mismatch: expected 0x{expected:02x}, got 0x{checksum:02x}"
        )
    return contents


def parse_command_frame(frame: bytes) -> list[CsafeCommand]:
    """Decode a command frame as written by build_frame()."""
    return decode_commands(unframe(frame))


def parse_response(frame: bytes) -> CsafeResponse:
    """Parse a response frame read from the control channel.

    Raises:
        FormatError: If the frame or any response in it is truncated
        InvalidResponseError: If framing or checksum is invalid
    """
    contents = unframe(frame, MIN_RESPONSE_LENGTH)
    return CsafeResponse(
        status=contents[0],
        responses=tuple(_decode_responses(contents[1:])),
    )
