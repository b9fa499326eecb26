# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .login_employee import InvalidCredentialsError, LoginEmployeeUseCase
from .logout_employee import LogoutEmployeeUseCase

__all__ = ["InvalidCredentialsError", "LoginEmployeeUseCase", "LogoutEmployeeUseCase"]
