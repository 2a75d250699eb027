# loccorr

Building blocks for locating bright spots on camera frames. The package
reads FITS files and common raster images, filters and thresholds them,
cleans packed binary masks and labels the 4-connected objects that remain.

## What is inside

- `loccorr.fits` – the `Image` dataclass (pixel data as a `(height, width)`
  float32 array, size, storage type, extremal values and header records)
  with `Image.blank`, `Image.similar` and `Image.update_minmax`.
  `read_fits` reads the primary image of a FITS file (plain or gzip
  compressed) together with the header records of every HDU; `write_fits`
  writes a new file and refuses to replace an existing one unless the name
  starts with `!`. Integer storage types are rescaled from the image's
  minimum and maximum on writing. Problems raise `FitsError`.
- `loccorr.imagefile` – detection of the input type by file signature
  (`InputType`, `check_input`), loading of FITS, BMP, GIF, JPEG and PNG
  files with `read_image` (raster images are converted to gray and flipped
  upside down), linear scaling and histogram equalisation to 8-bit
  (`linear`, `equalize`), grayscale JPEG output (`write_jpg`) and
  conversions between floating images, packed binary masks (8 pixels per
  byte, most significant bit first) and label arrays (`image_to_bin`,
  `bin_to_image`, `bin_to_labels`, `labels_to_image`).
- `loccorr.median` – median of a sample (`calc_median`), a running median
  over the last N values (`RunningMedian` with `insert`, `median` and
  `stat`), square-window median filtering (`get_median`), local mean and
  standard deviation (`get_stat`, returning two images) and a
  histogram-based background level (`calc_background`). The filters leave
  a border of `seed` pixels at zero.
- `loccorr.binmorph` – erosion of packed masks by a 3x3 cross (`erosion`,
  `erosion_n`) and removal of pixels with no set 8-neighbour (`filter8`).
- `loccorr.labeling` – `label_components` numbers the 4-connected
  components of a binary array and returns the label array with the count.
- `loccorr.draw` – a three-channel image (`Img3`) and opacity patterns
  (`Pattern.cross`, `Pattern.draw3`) for marking positions on output frames.
- `loccorr.cmdlnopts` – the processing parameters (`GlobalParams`) and
  `parse_args`, which fills them from a list of command-line arguments.
- `loccorr.watcher` – `watch_file` and `watch_directory` call a function
  each time a file is closed after writing, until a stop event is set.

## Example

```python
from loccorr.imagefile import read_image, image_to_bin
from loccorr.median import get_median, calc_background
from loccorr.binmorph import erosion_n
from loccorr.imagefile import bin_to_labels
from loccorr.labeling import label_components

frame = read_image("frame.fits")
smooth = get_median(frame, 1)          # 3x3 median filter
level = calc_background(smooth)        # background threshold
mask = image_to_bin(smooth, level)     # packed binary mask
mask = erosion_n(mask, smooth.width, smooth.height, 2)
labels, count = label_components(
    bin_to_labels(mask, smooth.width, smooth.height), smooth.width, smooth.height
)
```

`erosion` and `filter8` need images of at least 9 x 3 pixels and raise
`ValueError` for smaller ones; `erosion_n` returns a smaller mask unchanged.

## Watching for new frames

```python
import threading
from loccorr.watcher import watch_directory

stop = threading.Event()
watch_directory("/data/frames", print, stop)
```

The call blocks and passes `<directory>/<file name>` of each file closed
after writing to the given function until `stop` is set from another
thread; it returns how many files were handled.

## What the package does not do

There is no command to run: `parse_args` only turns arguments into a
`GlobalParams`, and nothing ties reading, filtering and labelling into a
processing loop. Dilation, opening and closing of masks, centroid
calculation, configuration files and control of correction motors are not
part of the package.