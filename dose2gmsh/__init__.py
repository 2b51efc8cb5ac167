# -*- coding: utf-8 -*-

"""

dose2gmsh: 3ddose → Gmsh / VTK / CSV Converter
==============================================

──────────────────────────────────────────────────────────────────────────────
Description
──────────────────────────────────────────────────────────────────────────────
dose2gmsh converts DOSXYZnrc (EGSnrc) 3ddose dose distributions into mesh and
table formats that Gmsh, ParaView and spreadsheet tools can read.

──────────────────────────────────────────────────────────────────────────────
WHY THIS EXISTS
──────────────────────────────────────────────────────────────────────────────
- 3ddose stores a rectilinear voxel grid as bare boundary and dose arrays,
  which no visualization tool reads directly.
- Gmsh's msh format and VTK's cell data attach each dose to an explicit
  hexahedron, so the distribution can be sliced, contoured and compared.

"""

from .dose import DoseBlock

from .errors import (
    Dose2GmshError,
    IoError,
    FormatError,
    NumericParseError,
    EncodingError,
)

from .parser import (
    parse,
    read_3ddose,
    encode_3ddose,
)

from .encoders import (
    OutputFormat,
    encode,
    encode_msh2,
    encode_vtk,
    encode_csv,
    encode_vtkhdf,
)

from .converter import (
    DoseConverter,
    default_output_path,
    parse_format_arg,
    __version__,
)
