# -*- coding: utf-8 -*-

r"""

──────────────────────────────────────────────────────────────────────────────
Output encoders
──────────────────────────────────────────────────────────────────────────────
Each encoder turns a DoseBlock into the bytes of one output file:

 - msh2    Gmsh 2.2 ASCII mesh: hexahedral elements with element data
 - vtk     legacy ASCII VTK: structured points, or a rectilinear grid when
           any axis is non-uniformly spaced
 - csv     one row per voxel: center coordinates, dose, uncertainty
 - vtkhdf  VTKHDF UnstructuredGrid (HDF5) for ParaView

Floats are written with their shortest round-trip repr so no value is rounded.
Voxels, nodes and element ids all run x fastest, then y, then z.

Hexahedron corner numbering (Gmsh and VTK agree on it):

               v
        3----------2
        |\     ^   |\
        | \    |   | \
        |  \   |   |  \
        |   7------+---6
        |   |  +-- |-- | -> u
        0---+---\--1   |
         \  |    \  \  |
          \ |     \  \ |
           \|      w  \|
            4----------5

"""

from __future__ import annotations

import csv
import enum
import io
import logging
from typing import Dict, Optional, Tuple

import numpy as np
import h5py as h5

from .dose import AXES, DoseBlock
from .errors import EncodingError

logger = logging.getLogger("dose2gmsh")

# Gmsh element type 5 and VTK cell type 12 are both the 8-node hexahedron
GMSH_HEXAHEDRON = 5
VTK_HEXAHEDRON = 12

DOSE_LABEL = "Dose [Gy·cm2]"
UNCERTAINTY_LABEL = "Uncertainty fraction"


class OutputFormat(enum.Enum):
    MSH2 = "msh2"
    VTK = "vtk"
    CSV = "csv"
    VTKHDF = "vtkhdf"

    @property
    def extension(self) -> str:
        return EXTENSIONS[self]


EXTENSIONS = {
    OutputFormat.MSH2: ".msh",
    OutputFormat.VTK: ".vtk",
    OutputFormat.CSV: ".csv",
    OutputFormat.VTKHDF: ".vtkhdf",
}


def _check_block(block: DoseBlock) -> Tuple[int, int, int]:
    """
    Verify that counts, boundaries and payloads agree before writing anything.

    Returns the voxel counts as plain ints.
    """
    try:
        counts = tuple(int(n) for n in block.voxel_counts)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"voxel counts are not integers: {block.voxel_counts!r}") from e

    if len(counts) != 3 or any(n <= 0 for n in counts):
        raise EncodingError(f"voxel counts must be three positive integers, got {counts}")

    if len(block.boundaries) != 3:
        raise EncodingError(f"expected 3 boundary sequences, got {len(block.boundaries)}")

    for axis, n, bounds in zip(AXES, counts, block.boundaries):
        if len(bounds) != n + 1:
            raise EncodingError(
                f"{axis}-boundaries have {len(bounds)} values but {n} voxels need {n + 1}"
            )

    num_voxels = counts[0] * counts[1] * counts[2]
    if len(block.doses) != num_voxels:
        raise EncodingError(
            f"{len(block.doses)} dose values do not match {num_voxels} voxels"
        )
    if block.errors is not None and len(block.errors) != num_voxels:
        raise EncodingError(
            f"{len(block.errors)} uncertainty values do not match {num_voxels} voxels"
        )

    return counts


def _node_coordinates(block: DoseBlock) -> np.ndarray:
    """(N, 3) array of node coordinates, x fastest."""
    xs, ys, zs = (np.asarray(b, dtype=np.float64) for b in block.boundaries)
    z, y, x = np.meshgrid(zs, ys, xs, indexing="ij")
    return np.column_stack([x.ravel(), y.ravel(), z.ravel()])


def _voxel_centers(block: DoseBlock) -> np.ndarray:
    """(M, 3) array of voxel midpoints, in dose order."""
    bounds = [np.asarray(b, dtype=np.float64) for b in block.boundaries]
    cx, cy, cz = (0.5 * (b[:-1] + b[1:]) for b in bounds)
    z, y, x = np.meshgrid(cz, cy, cx, indexing="ij")
    return np.column_stack([x.ravel(), y.ravel(), z.ravel()])


def _hexahedra(counts: Tuple[int, int, int]) -> np.ndarray:
    """
    (M, 8) array of 0-based corner node indices per voxel, in dose order.
    """
    nx, ny, nz = counts
    row = nx + 1
    layer = (nx + 1) * (ny + 1)

    k, j, i = np.meshgrid(np.arange(nz), np.arange(ny), np.arange(nx), indexing="ij")
    n0 = (i + row * j + layer * k).ravel().astype(np.int64)

    return np.column_stack(
        [
            n0,
            n0 + 1,
            n0 + row + 1,
            n0 + row,
            n0 + layer,
            n0 + layer + 1,
            n0 + layer + row + 1,
            n0 + layer + row,
        ]
    )


def _values(arr) -> list:
    return np.asarray(arr, dtype=np.float64).tolist()


# ──────────────────────────────────────────────────────────────────────────────
# Gmsh
# ──────────────────────────────────────────────────────────────────────────────

def _write_element_data(out: io.StringIO, name: str, data) -> None:
    values = _values(data)
    out.write("$ElementData\n")
    # one string tag (field name), one real tag (time),
    # three int tags (timestep, components, number of values)
    out.write(f'1\n"{name}"\n')
    out.write("1\n0.0\n")
    out.write(f"3\n0\n1\n{len(values)}\n")
    for elt_id, value in enumerate(values, start=1):
        out.write(f"{elt_id} {value!r}\n")
    out.write("$EndElementData\n")


def encode_msh2(block: DoseBlock) -> bytes:
    """
    Encode as a Gmsh 2.2 ASCII mesh.

    One node per voxel corner, one 8-node hexahedron per voxel, then the doses
    (and uncertainties, if any) as element data. Ids start at 1.
    """
    counts = _check_block(block)
    nodes = _node_coordinates(block)
    hexes = _hexahedra(counts) + 1

    out = io.StringIO()
    out.write("$MeshFormat\n2.2 0 8\n$EndMeshFormat\n")

    out.write(f"$Nodes\n{len(nodes)}\n")
    for node_id, (x, y, z) in enumerate(nodes.tolist(), start=1):
        out.write(f"{node_id} {x!r} {y!r} {z!r}\n")
    out.write("$EndNodes\n")

    # two tags, physical and elementary entity, both unused
    out.write(f"$Elements\n{len(hexes)}\n")
    for elt_id, corners in enumerate(hexes.tolist(), start=1):
        out.write(f"{elt_id} {GMSH_HEXAHEDRON} 2 0 0 {' '.join(map(str, corners))}\n")
    out.write("$EndElements\n")

    _write_element_data(out, DOSE_LABEL, block.doses)
    if block.errors is not None:
        _write_element_data(out, UNCERTAINTY_LABEL, block.errors)

    logger.debug("msh2: %d nodes, %d hexahedra", len(nodes), len(hexes))
    return out.getvalue().encode("utf-8")


# ──────────────────────────────────────────────────────────────────────────────
# Legacy VTK
# ──────────────────────────────────────────────────────────────────────────────

def uniform_spacing(bounds) -> Optional[float]:
    """
    Return the step of an evenly spaced boundary sequence, or None if uneven.

    The step counts as even only if origin + step * i gives back every
    boundary exactly, so a structured-points file loses no coordinate.
    """
    bounds = np.asarray(bounds, dtype=np.float64)
    step = bounds[1] - bounds[0]
    rebuilt = bounds[0] + step * np.arange(len(bounds))
    if np.array_equal(rebuilt, bounds):
        return float(step)
    return None


def _write_scalars(out: io.StringIO, name: str, data) -> None:
    out.write(f"SCALARS {name} double 1\n")
    out.write("LOOKUP_TABLE default\n")
    for value in _values(data):
        out.write(f"{value!r}\n")


def encode_vtk(block: DoseBlock) -> bytes:
    """
    Encode as a legacy ASCII VTK file with cell data.

    Uniformly spaced grids are written as STRUCTURED_POINTS (origin and
    spacing). If any axis is unevenly spaced the whole grid is written as a
    RECTILINEAR_GRID with explicit coordinate arrays instead.
    """
    counts = _check_block(block)
    num_voxels = counts[0] * counts[1] * counts[2]
    dims = " ".join(str(n + 1) for n in counts)
    spacing = [uniform_spacing(b) for b in block.boundaries]

    out = io.StringIO()
    out.write("# vtk DataFile Version 3.0\n")
    out.write("3ddose dose distribution\n")
    out.write("ASCII\n")

    if all(s is not None for s in spacing):
        logger.debug("vtk: uniform grid, writing STRUCTURED_POINTS")
        origin = [float(b[0]) for b in block.boundaries]
        out.write("DATASET STRUCTURED_POINTS\n")
        out.write(f"DIMENSIONS {dims}\n")
        out.write(f"ORIGIN {' '.join(map(repr, origin))}\n")
        out.write(f"SPACING {' '.join(map(repr, spacing))}\n")
    else:
        uneven = [axis for axis, s in zip(AXES, spacing) if s is None]
        logger.debug("vtk: uneven spacing along %s, writing RECTILINEAR_GRID", ",".join(uneven))
        out.write("DATASET RECTILINEAR_GRID\n")
        out.write(f"DIMENSIONS {dims}\n")
        for axis, bounds in zip(AXES, block.boundaries):
            values = _values(bounds)
            out.write(f"{axis.upper()}_COORDINATES {len(values)} double\n")
            out.write(" ".join(map(repr, values)) + "\n")

    out.write(f"CELL_DATA {num_voxels}\n")
    _write_scalars(out, "dose", block.doses)
    if block.errors is not None:
        _write_scalars(out, "uncertainty", block.errors)

    return out.getvalue().encode("ascii")


# ──────────────────────────────────────────────────────────────────────────────
# CSV
# ──────────────────────────────────────────────────────────────────────────────

def encode_csv(block: DoseBlock) -> bytes:
    """
    Encode as a table with one row per voxel, in dose order.
    """
    _check_block(block)
    centers = _voxel_centers(block)

    header = ["xc [cm]", "yc [cm]", "zc [cm]", "Dose [Gy cm2]"]
    columns = [centers[:, 0], centers[:, 1], centers[:, 2], block.doses]
    if block.errors is not None:
        header.append(UNCERTAINTY_LABEL)
        columns.append(block.errors)

    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(zip(*(_values(c) for c in columns)))
    return out.getvalue().encode("ascii")


# ──────────────────────────────────────────────────────────────────────────────
# VTKHDF
# ──────────────────────────────────────────────────────────────────────────────

def encode_vtkhdf(block: DoseBlock, metadata: Optional[Dict[str, str]] = None) -> bytes:
    """
    Encode as a VTKHDF UnstructuredGrid of hexahedra with cell data.

    Args:
        block: the dose grid.
        metadata: extra string attributes stored on the VTKHDF root group
                  (e.g. generator command and version).
    """
    counts = _check_block(block)
    points = _node_coordinates(block)
    cells = _hexahedra(counts)

    buffer = io.BytesIO()
    with h5.File(buffer, "w") as f:
        root = f.create_group("VTKHDF", track_order=True)
        root.attrs["Version"] = (2, 2)
        root.attrs.create(
            "Type", b"UnstructuredGrid", dtype=h5.string_dtype("ascii", len(b"UnstructuredGrid"))
        )

        root.create_dataset("NumberOfPoints", data=np.array([len(points)], dtype="i8"))
        root.create_dataset("NumberOfCells", data=np.array([len(cells)], dtype="i8"))
        root.create_dataset("NumberOfConnectivityIds", data=np.array([cells.size], dtype="i8"))

        root.create_dataset("Points", data=points)
        root.create_dataset("Connectivity", data=cells.ravel())
        root.create_dataset("Offsets", data=np.arange(0, cells.size + 1, 8, dtype="i8"))
        root.create_dataset("Types", data=np.full(len(cells), VTK_HEXAHEDRON, dtype="u1"))

        celldata = root.create_group("CellData")
        celldata.create_dataset("Dose", data=np.asarray(block.doses, dtype=np.float64))
        if block.errors is not None:
            celldata.create_dataset("Uncertainty", data=np.asarray(block.errors, dtype=np.float64))

        root.create_group("PointData")
        root.create_group("FieldData")

        for key, value in (metadata or {}).items():
            root.attrs[key] = value

    logger.debug("vtkhdf: %d points, %d hexahedra", len(points), len(cells))
    return buffer.getvalue()


def encode(block: DoseBlock, fmt: OutputFormat, metadata: Optional[Dict[str, str]] = None) -> bytes:
    """
    Encode ``block`` in the given output format.

    ``metadata`` is only stored by formats that carry attributes (vtkhdf).
    """
    if fmt is OutputFormat.MSH2:
        return encode_msh2(block)
    elif fmt is OutputFormat.VTK:
        return encode_vtk(block)
    elif fmt is OutputFormat.CSV:
        return encode_csv(block)
    elif fmt is OutputFormat.VTKHDF:
        return encode_vtkhdf(block, metadata=metadata)
    raise EncodingError(f"unsupported output format: {fmt!r}")
