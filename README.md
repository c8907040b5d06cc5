# planefx

Filters that work on the planes of a video frame. Each plane is a 2-D numpy
array, and a frame is a list of planes described by a `VideoFormat`.

## Installation

    pip install .

Add the `test` extra to run the tests:

    pip install ".[test]"
    pytest

## Modules

- `planefx.videoinfo` describes a clip's format with `ColorFamily`,
  `SampleType`, `VideoFormat` and `VideoInfo`. It also has `int64_to_int`, which
  saturates a value to the 32-bit range, and the rational helpers
  `muldiv_rational`, `normalize_rational` and `add_rational`. Each helper
  returns a `(num, den)` tuple.
- `planefx.interpolation` builds coefficient tables for bilinear, cubic and
  Lanczos interpolation through `interpolation_scheme(method, quantiles)`.
  Method 1 is nearest point, 2 bilinear, 3 cubic and 4 is 6x6 Lanczos. The
  module also has the helpers that use these tables: `lanczos_quantile`,
  `along_line_interpolate`, `best_of_nine`, `best_of_nine_index`,
  `best_of_nine_index_fraction`, `need_not_interpolate`, `clamp` and `sinc`.
- `planefx.quad`: `unit_square_to_quad(quad)` returns the 3x3 matrix that
  maps the unit square onto a quadrilateral, together with its inverse. It
  raises `SingularQuadError` for a degenerate quadrilateral. `map_point`
  applies a matrix to a point.
- `planefx.watershed`: `watershed(image, connect4=True)` segments a plane by
  immersion and returns `(tags, watershed_mask)`.
- `planefx.stepfilter`: `StepFilter` evens out regular additive or
  multiplicative banding. It pulls each line average towards the frame
  average, or towards the average of a vertical segment, and can correct
  locally with a sliding horizontal segment. The helpers are
  `line_average`, `frame_average` and `correct_line`.
- `planefx.amplitude`: `Amplitude` uses watershed basins to guide its
  work. It smooths each sample only with neighbours from the same basin
  (`segment_smooth`) and sharpens the samples on watershed lines
  (`segment_sharp`). Its settings are `sh` (-5..5) and `sm` (0..10), one
  per plane. A separate guide frame can be passed to `process`.
- `planefx.gblur`: `GBlur` is a separable Gaussian blur. `ksize` is odd and
  from 3 to 11, and `sd` is the standard deviation. The helpers are
  `gaussian_kernel`, `effective_ksize` and `blur_plane`.
- `planefx.colorbox`: `ColorBox` builds a 640x480, 24 fps test pattern of
  coloured boxes in YUV formats. `make_frame()` builds a fresh frame.
  `get_frame(n)` returns one cached, read-only frame for every `n` in the
  clip. Both return `(planes, properties)`. The helpers are `fill_plane`
  and `paint_box`.

## Examples

```python
import numpy as np
from planefx.gblur import gaussian_kernel, blur_plane

plane = np.random.default_rng(0).integers(0, 256, (64, 64)).astype(np.uint8)
blurred = blur_plane(plane, gaussian_kernel(5, 1.5))
```

```python
from planefx.quad import unit_square_to_quad, map_point

forward, inverse = unit_square_to_quad([(0, 0), (2, 0), (2, 1), (0, 1)])
x, y = map_point(forward, 0.5, 0.5)   # (1.0, 0.5)
```

```python
import numpy as np
from planefx.videoinfo import ColorFamily, SampleType, VideoFormat
from planefx.stepfilter import StepFilter

fmt = VideoFormat(ColorFamily.GRAY, SampleType.INTEGER, 8)
frame = [np.full((120, 160), 128, dtype=np.uint8)]
corrected = StepFilter(add=True, segmenthor=0, segmentvert=0).process(frame, fmt)
```

## What it does not do

planefx has no command-line tool. It does not read or write video files, and
it does not plug into a video-processing framework. You supply the frames as
lists of numpy arrays and get new arrays back. It has no frequency-domain
filtering.