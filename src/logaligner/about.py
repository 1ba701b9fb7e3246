from logaligner import __version__

text = rf"""
# logaligner

The `logaligner` utility follows one or more log files while they are being written, and produces a
time-aligned table of their contents. It is helpful when analyzing interactions between separate programs
that are running at the same time, by viewing what each program was logging at each moment, side-by-side.

Each line is timestamped at the moment `logaligner` sees it appear in its file - log lines are never parsed, so
the files may use any timestamp format, or none at all. When listening is stopped (using Ctrl-C), the captured
lines are sampled at a fixed interval:

- one row per sampling interval, from the first moment that every file has logged a line, to the last moment
  that every file is still logging
- one column per file, in the order the files were given
- each cell holds the most recent line from that file at that row's time; if nothing new was logged
  during the interval, the previous line is repeated
- if a file logs several lines within one interval, only the last of them is shown

## Interactive functions

The interactive mode of `logaligner` defines several keystroke navigation commands:

| Key | Function                                                                                  |
|:---:|-------------------------------------------------------------------------------------------|
| ^D  | Toggle dark/light mode                                                                    |
|  F  | Prompt for search string and advance to first row containing that string (case-insensitive) |
|  N  | Advance to next instance of the current search string                                     |
|  P  | Move back to previous instance of the current search string                               |
|  L  | Prompt for line number to move cursor to                                                  |
|  T  | Prompt for timestamp to move cursor to (moves to first row at or after the timestamp)     |
|  H  | Display this helpful text                                                                 |
|  Q  | Quit                                                                                      |


## Command line options

The command to run `logaligner` accepts several options, followed by one or more file names:

| Option              | Description                                                                     |
|---------------------|---------------------------------------------------------------------------------|
| --output, -o        | save report to CSV file ('-' to display as a table on stdout, the default)      |
| --precision, -p     | sampling interval in milliseconds (default 1000)                                |
| --verbose, -v       | show each line as it is captured                                                |
| --interactive, -i   | display report in interactive mode                                              |
| --line_numbers, -ln | display with a leading line number column                                       |
| --timestamps, -t    | display with a leading row timestamp column                                     |
| --encoding, -enc    | encoding to use when reading log files                                          |
| --poll_interval     | seconds between checks of the log files for new lines (default 0.1)             |
| --demo              | run logaligner with simulated log sources                                       |


## Usage tips

### Files that do not exist yet

Files can be given before the programs that write them have started. `logaligner` waits for each file to be
created, and captures everything written to it from then on. For files that already exist, only lines written
after `logaligner` starts are captured.

### Files with no captured lines

If any file logs nothing while `logaligner` is listening, there is no value to show in its column, and no
report is generated. `logaligner` names the file in its error message, and exits with a non-zero status.

### Capture times are approximate

A line's time is the time `logaligner` noticed it, which can be up to one polling interval after the line was
actually written. Choose a sampling precision that is comfortably larger than `--poll_interval`.


## About logaligner

logaligner version {__version__}

MIT License
"""  # noqa
