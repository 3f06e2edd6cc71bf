# oculo

The core of a minimalistic image viewer: the parts that do not need a window
system. It is a library; it has no command of its own.

## Contents

- `oculo.shortcuts`: the `InputEvent` actions, the default key map
  (`default_keys`), matching a `KeyboardState` against a command
  (`key_pressed`), and display of key combinations as text (`lookup`,
  `keypresses_as_string`) or `<kbd>` markdown (`keypresses_as_markdown`).
- `oculo.controls`: which actions a keyboard state triggers
  (`triggered_events`), keyboard panning (`pan_for`), mouse-wheel handling
  (`wheel_action`, `WheelAction`) and drag state (`drag_enabled_after`).
- `oculo.view`: `ImageGeometry` (offset, scale, dimensions), fitting an image
  into the free draw area (`fit_to_window`), keeping the offset near the window
  (`limit_offset`), pixel-aligned offsets and tiled draw positions.
- `oculo.settings`: `PersistentSettings` (`config.json`) and
  `VolatileSettings` (`config_volatile.json`), stored as JSON in the user's data
  directory or a folder you pass in; HEIF decoder limits (`HeifLimits`,
  `Limit`, `DecoderSettings`).
- `oculo.thumbnails`: centre-cropped 120×90 PNG thumbnails in the user's cache
  directory. `Thumbnails.get` returns a cached thumbnail, or starts creating it
  in a background thread and raises `ThumbnailPending`.
- `oculo.paint`: `PaintStroke` brush strokes rendered onto H×W×4 `uint8`
  NumPy arrays, plus `paint_at` and `dotted_line`.
- `oculo.channels`: `ColorChannel` and the matrix/offset transform that shows a
  single channel (`channel_transform`, `apply_channel`).
- `oculo.tiling`: `PixelFormat`, conversion of unsupported formats to RGBA8 or
  RGBA float, and the tile grid for a maximum texture size.
- `oculo.textures`: `TexWrap`, an image held as a grid of tiles with lookup of
  the tile at a pixel and the pieces of a magnified view; `TextureManager`,
  which reuses the current texture when size and format match.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from oculo.shortcuts import InputEvent, default_keys, lookup

keys = default_keys("linux")
print(lookup(keys, InputEvent.CompareNext))   # LShift + C
```

```python
from oculo.view import ImageGeometry, fit_to_window

geometry = fit_to_window(ImageGeometry(), (1000, 500), (0, 0, 800, 600), (800, 600))
print(geometry.scale, geometry.offset)        # 0.8 (0.0, 100.0)
```

```python
from pathlib import Path
from oculo.settings import PersistentSettings

settings = PersistentSettings()
settings.wrap_folder = False
settings.save_blocking(Path("my-config"))
print(PersistentSettings.load(Path("my-config")).wrap_folder)   # False
```

```python
import numpy as np
from oculo.textures import TexWrap
from oculo.tiling import PixelFormat

pixels = np.zeros((300, 500, 4), dtype=np.uint8)
tex = TexWrap.from_image(pixels, PixelFormat.Rgba8, max_texture_size=256)
print(tex.col_count, tex.row_count)           # 2 2
print(tex.texture_at(300, 10).tile_index)     # 1
```

```python
import numpy as np
from oculo.paint import PaintStroke

img = np.zeros((100, 100, 4), dtype=np.uint8)
brush = np.full((16, 16, 4), 255, dtype=np.uint8)
stroke = PaintStroke.new()
stroke.points = [(0.1, 0.5), (0.9, 0.5)]
stroke.render(img, [brush])
```

## What it does not do

- There is no command-line program and no window: nothing here opens or draws
  images on screen.
- It does not list or step through the images of a folder, and it does not
  remember recently opened files beyond what you store in `VolatileSettings`.
- It does not receive images over the network or read them from standard input.
- Decoding is limited to what Pillow opens when thumbnails are generated.