"""
Conversions between packed 24-bit RGB, linear sRGB, CIE XYZ and CIE LAB (D65).

All functions work on numpy arrays with the channel axis last, so a single
color and a batch of colors go through the same code path.
"""

import numpy as np


# =============================================================================
# Constants
# =============================================================================

# D65 reference white
XN, YN, ZN = 0.95047, 1.0, 1.08883

# sRGB transfer function breakpoint (encoded side)
GAMMA_THRESHOLD = 0.03928

# LAB nonlinearity breakpoint: (6/29)^3
LAB_EPSILON = 216 / 24389

SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])

XYZ_TO_SRGB = np.array([
    [3.2404548360214087, -1.537138850102575, -0.4985315468684809],
    [-0.9692663898756537, 1.876010928842491, 0.04155608234667351],
    [0.055643419604213644, -0.20402585426769815, 1.0572251624579287],
])


# =============================================================================
# Packed integer <-> RGB channels
# =============================================================================

def packed_to_rgb(colors) -> np.ndarray:
    """Split packed 0x00RRGGBB integers into an (..., 3) array of channels."""
    colors = np.asarray(colors, dtype=np.int64)
    return np.stack([(colors >> 16) & 0xFF, (colors >> 8) & 0xFF, colors & 0xFF], axis=-1)


def rgb_to_packed(rgb) -> np.ndarray:
    """Join an (..., 3) array of 0-255 channels into packed integers."""
    rgb = np.asarray(rgb, dtype=np.int64)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


# =============================================================================
# Gamma
# =============================================================================

def rgb_to_linear(rgb) -> np.ndarray:
    """Convert 0-255 channels to linear-light sRGB in [0, 1]."""
    v = np.asarray(rgb, dtype=np.float64) / 255.0
    return np.where(v <= GAMMA_THRESHOLD, v / 12.92, ((v + 0.055) / 1.055) ** 2.4)


def linear_to_rgb(linear) -> np.ndarray:
    """
    Gamma-encode linear sRGB and quantize to 0-255 integers.

    Rounding happens before clamping, so out-of-gamut values only lose
    precision at the 8-bit step.
    """
    linear = np.asarray(linear, dtype=np.float64)
    scaled = linear * 12.92
    use_linear = scaled <= GAMMA_THRESHOLD
    # Guard the power branch against negatives it will never select
    powered = np.power(np.where(use_linear, 0.0, linear), 1 / 2.4) * 1.055 - 0.055
    encoded = np.where(use_linear, scaled, powered)
    return np.clip(np.rint(encoded * 255), 0, 255).astype(np.int64)


# =============================================================================
# Linear sRGB <-> XYZ
# =============================================================================

def linear_to_xyz(linear) -> np.ndarray:
    """Linear sRGB (..., 3) to CIE XYZ (..., 3)."""
    linear = np.asarray(linear, dtype=np.float64)
    r, g, b = linear[..., 0], linear[..., 1], linear[..., 2]
    m = SRGB_TO_XYZ
    x = m[0, 0] * r + m[0, 1] * g + m[0, 2] * b
    y = m[1, 0] * r + m[1, 1] * g + m[1, 2] * b
    z = m[2, 0] * r + m[2, 1] * g + m[2, 2] * b
    return np.stack([x, y, z], axis=-1)


def xyz_to_linear(xyz) -> np.ndarray:
    """CIE XYZ (..., 3) to linear sRGB (..., 3), unclamped."""
    xyz = np.asarray(xyz, dtype=np.float64)
    x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]
    m = XYZ_TO_SRGB
    r = m[0, 0] * x + m[0, 1] * y + m[0, 2] * z
    g = m[1, 0] * x + m[1, 1] * y + m[1, 2] * z
    b = m[2, 0] * x + m[2, 1] * y + m[2, 2] * z
    return np.stack([r, g, b], axis=-1)


# =============================================================================
# XYZ <-> LAB
# =============================================================================

def _lab_f(t: np.ndarray) -> np.ndarray:
    # cbrt keeps the (unused) branch defined for negative t
    return np.where(t > LAB_EPSILON, np.cbrt(t), 841 * t / 108 + 4 / 29)


def _lab_f_inverse(f: np.ndarray) -> np.ndarray:
    cubed = f ** 3
    return np.where(cubed > LAB_EPSILON, cubed, (f - 4 / 29) * 108 / 841)


def xyz_to_lab(xyz) -> np.ndarray:
    """CIE XYZ (..., 3) to CIE LAB (..., 3) with the D65 white point."""
    xyz = np.asarray(xyz, dtype=np.float64)
    fx = _lab_f(xyz[..., 0] / XN)
    fy = _lab_f(xyz[..., 1] / YN)
    fz = _lab_f(xyz[..., 2] / ZN)

    L = 116 * fy - 16
    a = 500 * (fx - fy)
    b = 200 * (fy - fz)
    return np.stack([L, a, b], axis=-1)


def lab_to_xyz(lab) -> np.ndarray:
    """CIE LAB (..., 3) to CIE XYZ (..., 3) with the D65 white point."""
    lab = np.asarray(lab, dtype=np.float64)
    fy = (lab[..., 0] + 16) / 116
    fx = lab[..., 1] / 500 + fy
    fz = fy - lab[..., 2] / 200

    x = XN * _lab_f_inverse(fx)
    y = YN * _lab_f_inverse(fy)
    z = ZN * _lab_f_inverse(fz)
    return np.stack([x, y, z], axis=-1)


# =============================================================================
# Full chains
# =============================================================================

def packed_to_lab_array(colors) -> np.ndarray:
    """Convert packed colors (any shape) to LAB, adding a trailing axis of 3."""
    return xyz_to_lab(linear_to_xyz(rgb_to_linear(packed_to_rgb(colors))))


def lab_to_packed_array(lab) -> np.ndarray:
    """Convert LAB (..., 3) back to packed integers, clamped to the sRGB cube."""
    return rgb_to_packed(linear_to_rgb(xyz_to_linear(lab_to_xyz(lab))))


def packed_to_lab(color: int) -> np.ndarray:
    """Convert one packed 0x00RRGGBB color to a LAB triple."""
    return packed_to_lab_array(np.int64(color))


def lab_to_packed(lab) -> int:
    """Convert one LAB triple back to a packed 0x00RRGGBB color."""
    return int(lab_to_packed_array(np.asarray(lab, dtype=np.float64).reshape(3)))


# =============================================================================
# Formatting
# =============================================================================

def int_to_hex(color: int, prepend_hash: bool = True) -> str:
    """Format a packed color as an uppercase 6-digit hex string."""
    return ('#' if prepend_hash else '') + f"{color:06X}"


def hex_to_int(text: str) -> int:
    """
    Parse a hex color with or without a leading '#'.

    Raises:
        ValueError: If the text is not hexadecimal or exceeds 24 bits
    """
    digits = text.strip().lstrip('#')
    try:
        value = int(digits, 16)
    except ValueError:
        raise ValueError(f"Not a hex color: {text!r}")
    if not 0 <= value <= 0xFFFFFF:
        raise ValueError(f"Hex color out of 24-bit range: {text!r}")
    return value
