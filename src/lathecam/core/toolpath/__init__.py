"""Toolpath generation package: containers plus one module per strategy."""

from .base import MoveType, Movement, Toolpath
from .chamfering import ChamferingParams, ChamferType
from .contouring import ContouringParams
from .drilling import DrillingParams, DrillingStrategy
from .facing import FacingParams
from .finishing import FinishingParams, FinishingStrategy, SurfaceQuality
from .grooving import GroovingParams
from .parting import PartingParams
from .roughing import RoughingParams
from .threading import ThreadingParams

__all__ = [
    "MoveType", "Movement", "Toolpath",
    "ChamferingParams", "ChamferType", "ContouringParams",
    "DrillingParams", "DrillingStrategy", "FacingParams",
    "FinishingParams", "FinishingStrategy", "SurfaceQuality",
    "GroovingParams", "PartingParams", "RoughingParams", "ThreadingParams",
]
