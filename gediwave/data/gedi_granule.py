"""Module for convenient objects to deal with GEDI data products"""
from __future__ import annotations

import pathlib
from typing import Iterable, Optional, Union

import h5py
import numpy as np

from gediwave.constants import BEAM_PATTERN, SHOT_NUMBER


class GediGranule(h5py.File):
    """
    A GEDI granule (`.h5` file) opened read-only.

    The granule owns the underlying file handle and must be closed by the
    caller, preferably by using it as a context manager:

        with GediGranule(path) as granule:
            ...

    Errors raised by h5py when opening the file (missing file, not an HDF5
    file) are propagated unchanged.
    """

    def __init__(self, file_path: Union[str, pathlib.Path]):
        super().__init__(file_path, "r")
        self.file_path = pathlib.Path(file_path)
        self.beam_names = [
            name for name in self.keys() if BEAM_PATTERN.match(name)
        ]

    @property
    def product(self) -> str:
        return self["METADATA"]["DatasetIdentification"].attrs["shortName"]

    @property
    def filename(self) -> str:
        return self["METADATA"]["DatasetIdentification"].attrs["fileName"]

    @property
    def n_beams(self) -> int:
        return len(self.beam_names)

    def beam(self, identifier: Union[str, int]) -> GediBeam:
        if isinstance(identifier, int):
            return self._beam_from_index(identifier)
        elif isinstance(identifier, str):
            return self._beam_from_name(identifier)
        else:
            raise ValueError(
                "identifier must either be the beam index or beam name"
            )

    def _beam_from_index(self, beam_index: int) -> GediBeam:
        if not 0 <= beam_index < self.n_beams:
            raise ValueError(
                f"Beam index must be between 0 and {self.n_beams-1}"
            )

        beam_name = self.beam_names[beam_index]
        return self._beam_from_name(beam_name)

    def _beam_from_name(self, beam_name: str) -> GediBeam:
        if not beam_name in self.beam_names:
            raise ValueError(f"Beam name must be one of: {self.beam_names}")
        return GediBeam(granule=self, beam_name=beam_name)

    def iter_beams(self) -> Iterable[GediBeam]:
        for beam_index in range(self.n_beams):
            yield self._beam_from_index(beam_index)

    def list_beams(self) -> list[GediBeam]:
        return list(self.iter_beams())

    def __repr__(self) -> str:
        try:
            product, filename = self.product, self.filename
        except KeyError:
            product, filename = "unknown", self.file_path.name
        description = (
            "GEDI Granule:\n"
            f" Granule name: {filename}\n"
            f" Product:      {product}\n"
            f" No. beams:    {self.n_beams}\n"
            f" HDF object:   {super().__repr__()}"
        )
        return description


class GediBeam(h5py.Group):
    """
    Class containing GEDI data for a single beam of a granule.

    Every per-shot dataset of a beam (shot_number, rx_sample_count,
    geolocation/elevation_bin0, ...) has one entry per shot. The received
    waveforms of all shots are stored back to back in the flat `rxwaveform`
    dataset and addressed through rx_sample_start_index/rx_sample_count.

    Args:
        granule: The parent granule for this beam
        beam_name: The name of this beam, e.g. BEAM0000
    """

    def __init__(self, granule: GediGranule, beam_name: str):
        super().__init__(granule[beam_name].id)
        self.parent_granule = granule  # Reference to parent granule

    @property
    def name(self) -> str:
        return super().name[1:]

    @property
    def n_shots(self) -> int:
        return len(self[SHOT_NUMBER])

    def find_datasets(self, basenames: Iterable[str]) -> dict[str, str]:
        """
        Map each requested base name to the path of the dataset carrying it.

        If the same base name occurs at several depths (e.g. `shot_number` and
        `geolocation/shot_number`), the shallowest path is used; paths at the
        same depth are resolved in traversal order.

        Args:
            basenames (Iterable[str]): Dataset names to look for.

        Returns:
            dict[str, str]: Paths relative to the beam, keyed by base name. Names
                without a matching dataset are left out.
        """
        wanted = set(basenames)
        found: dict[str, str] = {}

        def _visit(path: str, obj) -> None:
            if not isinstance(obj, h5py.Dataset):
                return
            basename = path.rsplit("/", 1)[-1]
            if basename not in wanted:
                return
            known = found.get(basename)
            if known is None or path.count("/") < known.count("/"):
                found[basename] = path

        self.visititems(_visit)
        return found

    def shot_index(self, shot_number: int) -> Optional[int]:
        """Return the row position of `shot_number` in this beam, or None."""
        matches = np.flatnonzero(self[SHOT_NUMBER][:] == shot_number)
        if len(matches) == 0:
            return None
        return int(matches[0])

    def rx_waveform(self, index: int) -> np.ndarray:
        """
        Return the received waveform samples of the shot at row `index`.

        Start indices are stored 1-based and relative to the whole granule,
        so they are rebased to the smallest start index of the beam.

        Raises:
            ValueError: If the rxwaveform dataset holds fewer samples than
                rx_sample_count declares for the shot.
        """
        start_indices = self["rx_sample_start_index"][:]
        start = int(start_indices[index] - start_indices.min())
        count = int(self["rx_sample_count"][index])
        rxwaveform = self["rxwaveform"]
        if count == 0:
            return np.empty(0, dtype=rxwaveform.dtype)
        samples = rxwaveform[start : start + count]
        if len(samples) != count:
            raise ValueError(
                f"Beam {self.name} rxwaveform holds {len(samples)} samples at "
                f"offset {start}, rx_sample_count declares {count}."
            )
        return samples

    def __repr__(self) -> str:
        description = (
            "GEDI Beam object:\n"
            f" Beam name:  {self.name}\n"
            f" Beam type:  {self.attrs.get('description', 'unknown')}\n"
            f" Shots:      {self.n_shots}\n"
            f" HDF object: {super().__repr__()}"
        )
        return description


def read_level1b(level1b_path: Union[str, pathlib.Path]) -> GediGranule:
    """Open a GEDI level 1B granule for reading."""
    return GediGranule(level1b_path)
