"""
Shared pytest setup: Taichi on the CPU backend, initialized once per session.

ti.init() resets the runtime and invalidates every field, so it must not be
called again from individual tests.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    ti.init(arch=ti.cpu, random_seed=0)
    yield
