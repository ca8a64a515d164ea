# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from typing import Optional


class RequestNetworkError(Exception):
    pass


class GatewayError(RequestNetworkError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RequestNotFoundError(RequestNetworkError):
    pass


class ConfirmationTimeoutError(RequestNetworkError):
    pass


class SignatureError(RequestNetworkError):
    pass


class InvalidRequestError(RequestNetworkError):
    pass
