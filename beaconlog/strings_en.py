"""English (en) strings for beaconlog."""

STRINGS: dict = {
    # ── Scan session ──────────────────────────────────────────────────
    "scan_started": "Scanning started...",
    "scan_stopped": "Scanning stopped, took {ms} ms",
    "scan_row": "CSV data row: {row}",
    "scan_saved": "Saved to {path} ({rows})",
    "scan_save_failed": "Saving failed: {error}",
    "scan_start_failed": "Could not start scanning: {error}",
    "scan_aborted": "Scanning aborted, row discarded",
    "radio_state": "Bluetooth status: {state}",

    # ── Console ───────────────────────────────────────────────────────
    "console_prompt": "Press Enter to start scanning, 'help' for commands",
    "console_help": (
        "Commands:\n"
        "  <Enter> / start    start a scan session\n"
        "  label <text>       set the session label\n"
        "  interval <ms>      set the scan window\n"
        "  file <name>        set the output file name\n"
        "  status             show Bluetooth state and settings\n"
        "  logs               show the activity log\n"
        "  clear              clear the activity log\n"
        "  quit               exit"
    ),
    "console_status": (
        "Bluetooth: {bluetooth} | interval: {interval} ms | "
        "saving to {path} | label: '{label}'"
    ),
    "console_bluetooth_on": "ON",
    "console_bluetooth_off": "OFF",
    "console_busy": "Scan in progress, wait for it to finish",
    "console_label_set": "Label set to '{label}'",
    "console_interval_set": "Interval set to {interval} ms",
    "console_interval_invalid": "Invalid interval: {value}",
    "console_file_set": "File name set to {file_name}",
    "console_file_invalid": "File name must not be empty",
    "console_logs_cleared": "Logs cleared",
    "console_no_logs": "No log entries",
    "console_unknown_command": "Unknown command: {command}",
    "console_rows": lambda n, **_: f"{n} row" if n == 1 else f"{n} rows",
}
