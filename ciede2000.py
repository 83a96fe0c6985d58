"""
CIEDE2000 color difference between CIE LAB colors.

Follows Sharma, Wu & Dalal, "The CIEDE2000 Color-Difference Formula:
Implementation Notes, Supplementary Test Data, and Mathematical Observations"
(2005), with kL = kC = kH = 1. Hue angles are carried in degrees in [0, 360)
and converted to radians only at the trig calls.
"""

import numpy as np


POW25_7 = 25.0 ** 7


def _hue_angle(a_prime: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hue angle in degrees [0, 360); 0 for a neutral color."""
    neutral = (a_prime == 0) & (b == 0)
    hue = np.degrees(np.arctan2(b, a_prime)) % 360
    return np.where(neutral, 0.0, hue)


def delta_e_2000(lab1, lab2) -> np.ndarray:
    """
    Compute CIEDE2000 between LAB colors, broadcasting over leading axes.

    Args:
        lab1: Array of shape (..., 3) with [L, a, b]
        lab2: Array of shape (..., 3) with [L, a, b]

    Returns:
        Array of non-negative distances with the broadcast leading shape
    """
    lab1 = np.asarray(lab1, dtype=np.float64)
    lab2 = np.asarray(lab2, dtype=np.float64)
    L1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    L2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    # Step 1: chroma correction of the a axis
    C1 = np.sqrt(a1 * a1 + b1 * b1)
    C2 = np.sqrt(a2 * a2 + b2 * b2)
    C_bar7 = ((C1 + C2) / 2) ** 7
    G = 0.5 * (1 - np.sqrt(C_bar7 / (C_bar7 + POW25_7)))

    a1p = (1 + G) * a1
    a2p = (1 + G) * a2

    # Step 2: corrected chroma and hue
    C1p = np.sqrt(a1p * a1p + b1 * b1)
    C2p = np.sqrt(a2p * a2p + b2 * b2)
    h1p = _hue_angle(a1p, b1)
    h2p = _hue_angle(a2p, b2)

    # Step 3: differences
    dLp = L2 - L1
    dCp = C2p - C1p

    chroma_product = C1p * C2p
    achromatic = chroma_product == 0
    dh = h2p - h1p
    near = np.abs(dh) <= 180

    dhp = np.where(
        achromatic, 0.0,
        np.where(near, dh, np.where(dh > 180, dh - 360, dh + 360))
    )
    dHp = 2 * np.sqrt(chroma_product) * np.sin(np.radians(dhp / 2))

    # Step 4: means
    Lbp = (L1 + L2) / 2
    Cbp = (C1p + C2p) / 2

    h_sum = h1p + h2p
    hbp = np.where(
        achromatic, h_sum,
        np.where(near, h_sum / 2, np.where(h_sum < 360, (h_sum + 360) / 2, (h_sum - 360) / 2))
    )

    # Step 5: weighting functions
    T = (1
         - 0.17 * np.cos(np.radians(hbp - 30))
         + 0.24 * np.cos(np.radians(2 * hbp))
         + 0.32 * np.cos(np.radians(3 * hbp + 6))
         - 0.20 * np.cos(np.radians(4 * hbp - 63)))

    d_theta = 30 * np.exp(-(((hbp - 275) / 25) ** 2))

    Cbp7 = Cbp ** 7
    Rc = 2 * np.sqrt(Cbp7 / (Cbp7 + POW25_7))

    Lbp_50_sq = (Lbp - 50) ** 2
    Sl = 1 + (0.015 * Lbp_50_sq) / np.sqrt(20 + Lbp_50_sq)
    Sc = 1 + 0.045 * Cbp
    Sh = 1 + 0.015 * Cbp * T

    Rt = -np.sin(np.radians(2 * d_theta)) * Rc

    # Step 6: combine
    lightness = dLp / Sl
    chroma = dCp / Sc
    hue = dHp / Sh
    return np.sqrt(lightness ** 2 + chroma ** 2 + hue ** 2 + Rt * chroma * hue)


def ciede2000(lab1, lab2) -> float:
    """CIEDE2000 distance between two LAB triples."""
    return float(delta_e_2000(lab1, lab2))
