import pathlib

import h5py
import numpy as np
import pytest


def write_granule(path: pathlib.Path, beams: dict, product: str = "GEDI_L1B") -> pathlib.Path:
	"""Write a minimal GEDI-like granule with one group per beam."""
	with h5py.File(path, "w") as f:
		identification = f.create_group("METADATA/DatasetIdentification")
		identification.attrs["shortName"] = product
		identification.attrs["fileName"] = path.name
		for beam_name, datasets in beams.items():
			group = f.create_group(beam_name)
			group.attrs["description"] = "Full power beam"
			for name, values in datasets.items():
				group.create_dataset(name, data=np.asarray(values))
	return path


def level1b_beam(shot_numbers, lon_bin0, lat_bin0, lon_lastbin, lat_lastbin,
		elevation_bin0, elevation_lastbin, counts, starts, rxwaveform, **extra):
	shot_numbers = np.array(shot_numbers, dtype=np.uint64)
	beam = {
		"shot_number": shot_numbers,
		"rx_sample_count": np.array(counts, dtype=np.uint16),
		"rx_sample_start_index": np.array(starts, dtype=np.uint64),
		"rxwaveform": np.array(rxwaveform, dtype=np.float32),
		"geolocation/shot_number": shot_numbers,
		"geolocation/longitude_bin0": np.array(lon_bin0, dtype=np.float64),
		"geolocation/latitude_bin0": np.array(lat_bin0, dtype=np.float64),
		"geolocation/longitude_lastbin": np.array(lon_lastbin, dtype=np.float64),
		"geolocation/latitude_lastbin": np.array(lat_lastbin, dtype=np.float64),
		"geolocation/elevation_bin0": np.array(elevation_bin0, dtype=np.float64),
		"geolocation/elevation_lastbin": np.array(elevation_lastbin, dtype=np.float64),
	}
	beam.update(extra)
	return beam


# BEAM0000: one shot inside [0, 10] x [0, 10], two outside.
# BEAM0101: both shots inside, the second one without samples.
LEVEL1B_BEAMS = {
	"BEAM0000": level1b_beam(
		shot_numbers=[19640521100108401, 19640521100108402, 19640521100108403],
		lon_bin0=[5.0, 20.0, -3.0],
		lat_bin0=[5.0, 5.0, 5.0],
		lon_lastbin=[5.01, 20.01, -2.99],
		lat_lastbin=[4.99, 4.99, 4.99],
		elevation_bin0=[110.0, 200.0, 310.0],
		elevation_lastbin=[100.0, 200.0, 300.0],
		counts=[4, 3, 5],
		starts=[1, 5, 8],
		rxwaveform=[1, 3, 5, 2, 10, 10, 10, 0, 1, 2, 3, 4],
		rx_energy=np.array([1.5, 2.5, 3.5]),
	),
	"BEAM0101": level1b_beam(
		shot_numbers=[19640521100208501, 19640521100208502],
		lon_bin0=[1.0, 9.0],
		lat_bin0=[1.0, 9.0],
		lon_lastbin=[1.01, 9.01],
		lat_lastbin=[0.99, 8.99],
		elevation_bin0=[50.0, 60.0],
		elevation_lastbin=[40.0, 45.0],
		counts=[3, 0],
		starts=[13, 16],
		rxwaveform=[7, 8, 9],
	),
}


@pytest.fixture
def level1b_path(tmp_path):
	path = tmp_path / "GEDI01_B_2019108080338_O01964_T05337_02_003_01_sub.h5"
	return write_granule(path, LEVEL1B_BEAMS)


@pytest.fixture
def level2a_path(tmp_path):
	path = tmp_path / "GEDI02_A_2019108080338_O01964_T05337_02_001_01_sub.h5"
	beams = {
		"BEAM0010": {
			"shot_number": np.array([19640521100308601, 19640521100308602], dtype=np.uint64),
			"lat_lowestmode": np.array([2.0, 30.0]),
			"lon_lowestmode": np.array([2.0, 30.0]),
			"elev_lowestmode": np.array([12.5, 13.5]),
			"rh": np.zeros((2, 101)),
		},
	}
	return write_granule(path, beams, product="GEDI_L2A")
