#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: memory.py

    Description:
        Best-effort clearing of sensitive buffers. Only mutable buffers can be
        wiped; immutable bytes copies handed to third-party APIs are dropped
        instead.
"""

import typing


"""
    Overwrite a mutable buffer with zeros in place.

    @param buffer (bytearray | None): Buffer holding key material; None and immutable values are ignored.
    @ensures Every byte of a bytearray buffer is zero afterwards.
"""
def wipe(buffer: typing.Optional[typing.Union[bytearray, bytes]]) -> None:
    if isinstance(buffer, bytearray):
        buffer[:] = bytes(len(buffer))
