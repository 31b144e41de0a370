"""Finnish (fi) strings for beaconlog."""

STRINGS: dict = {
    # ── Scan session ──────────────────────────────────────────────────
    "scan_started": "Skannaus aloitettu...",
    "scan_stopped": "Skannaus pysäytetty, kesto {ms} ms",
    "scan_row": "CSV-rivi: {row}",
    "scan_saved": "Tallennettu tiedostoon {path} ({rows})",
    "scan_save_failed": "Tallennus epäonnistui: {error}",
    "scan_start_failed": "Skannauksen aloitus epäonnistui: {error}",
    "scan_aborted": "Skannaus keskeytetty, riviä ei tallennettu",
    "radio_state": "Bluetooth-tila: {state}",

    # ── Console ───────────────────────────────────────────────────────
    "console_prompt": "Paina Enter aloittaaksesi skannauksen, 'help' näyttää komennot",
    "console_help": (
        "Komennot:\n"
        "  <Enter> / start    aloita skannaus\n"
        "  label <teksti>     aseta tunniste\n"
        "  interval <ms>      aseta skannausikkuna\n"
        "  file <nimi>        aseta tiedoston nimi\n"
        "  status             näytä Bluetooth-tila ja asetukset\n"
        "  logs               näytä loki\n"
        "  clear              tyhjennä loki\n"
        "  quit               lopeta"
    ),
    "console_status": (
        "Bluetooth: {bluetooth} | ikkuna: {interval} ms | "
        "tallennus: {path} | tunniste: '{label}'"
    ),
    "console_bluetooth_on": "PÄÄLLÄ",
    "console_bluetooth_off": "POIS",
    "console_busy": "Skannaus käynnissä, odota sen päättymistä",
    "console_label_set": "Tunniste asetettu: '{label}'",
    "console_interval_set": "Ikkuna asetettu: {interval} ms",
    "console_interval_invalid": "Virheellinen ikkuna: {value}",
    "console_file_set": "Tiedoston nimi asetettu: {file_name}",
    "console_file_invalid": "Tiedoston nimi ei voi olla tyhjä",
    "console_logs_cleared": "Loki tyhjennetty",
    "console_no_logs": "Ei lokimerkintöjä",
    "console_unknown_command": "Tuntematon komento: {command}",
    "console_rows": lambda n, **_: f"{n} rivi" if n == 1 else f"{n} riviä",
}
