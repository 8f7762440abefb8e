# tilecomp

The display-independent logic of a scrollable-tiling Wayland compositor, as a plain
Python library with no dependencies outside the standard library.

- `tilecomp.config` reads and checks the KDL configuration: input devices, outputs,
  layout, cursor, key bindings, startup commands and debug options.
- `tilecomp.kdl` is the KDL document parser the configuration is built on.
- `tilecomp.keys` parses key combinations such as `Mod+Shift+H` and looks up keysyms
  by name.
- `tilecomp.animation` provides ease-out cubic value animations with a global
  slowdown factor.
- `tilecomp.frame_clock` predicts the next presentation time from the last one.
- `tilecomp.notification` and `tilecomp.exit_dialog` hold the state and placement of
  the config-error notification and the exit confirmation dialog.
- `tilecomp.cursor` parses Xcursor files, finds cursors in themes (following
  `Inherits`), picks frames by size and time, and caches named cursors.
- `tilecomp.ipc` defines the IPC request and response types and their JSON form.
- `tilecomp.display_config` builds the monitor list reported to display-configuration
  clients.

All times and durations in `animation`, `frame_clock` and `notification` are integer
nanoseconds.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install .[test]
pytest
```

## Examples

Parse a configuration:

```python
from tilecomp.config import Config

config = Config.parse('''
layout {
    gaps 8
    center-focused-column "on-overflow"
}
binds {
    Mod+T { spawn "alacritty"; }
}
''', "config.kdl")

config.layout.gaps         # 8
config.binds[0].actions    # [Action(name='spawn', argument=('alacritty',))]
```

`Config.load(path)` reads a file from disk. Unknown nodes, bad values and KDL syntax
errors raise `tilecomp.config.ConfigError`, which carries the file name and line.

Parse single values:

```python
from tilecomp.config import Mode, SizeChange
from tilecomp.keys import Key, Modifiers

Mode.parse("2560x1600@165.004")  # Mode(width=2560, height=1600, refresh=165.004)
SizeChange.parse("-10%")         # SizeChange(kind='adjust-proportion', value=-10.0)
Key.parse("Mod+Shift+H").modifiers == Modifiers.COMPOSITOR | Modifiers.SHIFT  # True
```

Animate a value (durations are scaled by `set_animation_slowdown`):

```python
from tilecomp.animation import Animation

anim = Animation(0.0, 1.0, 250_000_000, now=0)
anim.set_current_time(125_000_000)
anim.value()    # 0.875
anim.is_done()  # False
```

Predict the next frame:

```python
from tilecomp.frame_clock import FrameClock

clock = FrameClock(refresh_interval=16_666_667)
clock.presented(1_000_000_000)
clock.next_presentation_time(now=1_005_000_000)  # 1_016_666_667
```

Exchange IPC messages:

```python
from tilecomp.ipc import Request, decode_request, encode_request

decode_request(encode_request(Request.OUTPUTS))  # Request.OUTPUTS
```

Describe monitors, built-in panels first:

```python
from tilecomp.display_config import current_state

serial, monitors, logical, props = current_state(["HDMI-A-1", "eDP-1"])
[m.names[0] for m in monitors]  # ['eDP-1', 'HDMI-A-1']
```

## What it does not do

The package holds state, parsing and arithmetic only. It does not draw anything: the
notification and exit dialog report their text, colours and position, but no pixels.
It does not open a Wayland display, talk to input devices or graphics hardware, serve
D-Bus interfaces, or listen on or connect to the IPC socket; `tilecomp.ipc` only
encodes and decodes the messages. There is no command-line program.