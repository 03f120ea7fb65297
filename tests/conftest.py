import random
import numpy as np
import torch
import pytest

@pytest.fixture(scope="session", autouse=True)
def _seed_everywhere():
    random.seed(42)
    np.random.seed(42)
    torch.manual_seed(42)

@pytest.fixture
def reference_X():
    # 参照チェーン用の 4x2 行列
    return np.array([[-1.0, 2.0], [-0.5, 6.0], [0.0, 10.0], [1.0, 18.0]])
