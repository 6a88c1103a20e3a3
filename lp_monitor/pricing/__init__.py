"""Price providers and the synthetic estimator."""
from .birdeye import BirdeyePriceProvider
from .jupiter import JupiterPriceProvider
from .synthetic import SyntheticPriceEstimator

__all__ = ["BirdeyePriceProvider", "JupiterPriceProvider", "SyntheticPriceEstimator"]
