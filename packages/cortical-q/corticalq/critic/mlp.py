"""
Multi-Layer Perceptron (MLP) action-value estimator.

Maps the condensed state vector to one value per discrete action.

Architecture:
- Input: condensed state vector (block activity fractions in [0, 1])
- Hidden: configurable number of fully connected ReLU layers
- Output: one linear unit per action

Training follows an explicit accumulate-then-step protocol: per-sample
squared-error gradients are summed into the parameters' ``.grad`` buffers,
scaled by the caller, and consumed by a single RMSprop update whose decay,
learning rate and momentum are supplied per call.
"""

import copy
from typing import Any

import numpy as np
import torch
from pydantic import BaseModel, Field
from torch import nn, optim

from corticalq.logging_config import logger

DEFAULT_NUM_HIDDEN_LAYERS = 2
DEFAULT_HIDDEN_DIM = 32
DEFAULT_INIT_WEIGHT_STD = 0.1
DEFAULT_RMS_EPSILON = 1e-6


class MLPValueEstimatorConfig(BaseModel):
    """Configuration for the MLPValueEstimator."""

    num_hidden_layers: int = Field(default=DEFAULT_NUM_HIDDEN_LAYERS, ge=0)
    hidden_dim: int = Field(default=DEFAULT_HIDDEN_DIM, gt=0)
    init_weight_std: float = Field(default=DEFAULT_INIT_WEIGHT_STD, ge=0)
    rms_epsilon: float = Field(default=DEFAULT_RMS_EPSILON, gt=0)


class MLPValueEstimator:
    """Torch MLP implementing the value estimator interface."""

    def __init__(
        self,
        config: MLPValueEstimatorConfig,
        input_dim: int,
        num_actions: int,
        *,
        generator: torch.Generator | None = None,
    ) -> None:
        self.config = config
        self.num_inputs = input_dim
        self.num_outputs = num_actions

        self.network = self._build_network(config.hidden_dim, config.num_hidden_layers)
        self._initialize_parameters(config.init_weight_std, generator)

        # decay, rate and momentum are overwritten on every step
        self.optimizer = optim.RMSprop(
            self.network.parameters(),
            lr=0.0,
            alpha=0.99,
            eps=config.rms_epsilon,
            momentum=0.0,
        )

    def _build_network(self, hidden_dim: int, num_hidden_layers: int) -> nn.Sequential:
        if num_hidden_layers == 0:
            return nn.Sequential(nn.Linear(self.num_inputs, self.num_outputs))
        layers: list[nn.Module] = [nn.Linear(self.num_inputs, hidden_dim), nn.ReLU()]
        for _ in range(num_hidden_layers - 1):
            layers += [nn.Linear(hidden_dim, hidden_dim), nn.ReLU()]
        layers.append(nn.Linear(hidden_dim, self.num_outputs))
        return nn.Sequential(*layers)

    def _initialize_parameters(self, std: float, generator: torch.Generator | None) -> None:
        """Draw every weight and bias from N(0, std^2)."""
        param_count = 0
        with torch.no_grad():
            for param in self.network.parameters():
                param.copy_(torch.randn(param.shape, generator=generator) * std)
                param_count += param.numel()

        logger.info(
            f"MLPValueEstimator {self.num_inputs} -> {self.num_outputs}: "
            f"{param_count:,} parameters, init std {std}",
        )

    def _as_tensor(self, array: np.ndarray) -> torch.Tensor:
        return torch.as_tensor(np.asarray(array), dtype=torch.float32)

    def evaluate(self, state: np.ndarray) -> np.ndarray:
        """Return the action values for a state or a ``(batch, inputs)`` array."""
        with torch.no_grad():
            output = self.network(self._as_tensor(state))
        return output.numpy().astype(np.float64)

    def begin_gradient_accumulation(self) -> None:
        """Zero the gradient buffers."""
        self.optimizer.zero_grad(set_to_none=False)

    def accumulate_gradient(self, state: np.ndarray, target: np.ndarray) -> float:
        """Add the gradient of ``0.5 * ||output - target||^2``, summed over a batch."""
        output = self.network(self._as_tensor(state))
        loss = 0.5 * (output - self._as_tensor(target)).pow(2).sum()
        loss.backward()
        return float(loss.item())

    def scale_accumulated_gradient(self, factor: float) -> None:
        """Multiply every gradient buffer by ``factor``."""
        with torch.no_grad():
            for param in self.network.parameters():
                if param.grad is not None:
                    param.grad.mul_(factor)

    def apply_gradient_step(self, decay: float, rate: float, momentum: float) -> None:
        """Take one RMSprop step with the given decay, learning rate and momentum."""
        for group in self.optimizer.param_groups:
            group["alpha"] = decay
            group["lr"] = rate
            group["momentum"] = momentum
            if momentum > 0:
                # RMSprop only allocates momentum buffers when momentum is set on its first step
                for param in group["params"]:
                    state = self.optimizer.state[param]
                    if state and "momentum_buffer" not in state:
                        state["momentum_buffer"] = torch.zeros_like(param)
        self.optimizer.step()

    def accumulated_gradient(self) -> list[torch.Tensor]:
        """Return copies of the current gradient buffers."""
        return [
            param.grad.detach().clone() if param.grad is not None else torch.zeros_like(param)
            for param in self.network.parameters()
        ]

    def state_dict(self) -> dict[str, Any]:
        """Snapshot network weights and optimizer state."""
        return {
            "network": copy.deepcopy(self.network.state_dict()),
            "optimizer": copy.deepcopy(self.optimizer.state_dict()),
        }

    def load_state_dict(self, state: dict[str, Any]) -> None:
        """Restore a snapshot taken with :meth:`state_dict`."""
        self.network.load_state_dict(state["network"])
        self.optimizer.load_state_dict(state["optimizer"])

    def copy(self) -> "MLPValueEstimator":
        """Return an independent deep copy of this estimator."""
        return copy.deepcopy(self)
