# User-facing wording, kept in one place so the panels and services agree.
NAMES_REQUIRED = "Vor- und Nachname sind erforderlich."
TEAM_NAME_REQUIRED = "Bitte einen Teamnamen eingeben."
TEAM_NAME_TAKEN = "Ein Team mit diesem Namen existiert bereits."
GENERIC_FAILURE = "Ein Fehler ist aufgetreten. Bitte versuchen Sie es später erneut."
IMPORT_FAILED = "Fehler beim Importieren der Spieler."
NOTHING_TO_IMPORT = "Keine gültigen Spielerdaten in der CSV-Datei gefunden."
IMPORT_UNREADABLE = "Die CSV-Datei konnte nicht gelesen werden. Bitte als UTF-8-CSV speichern."
EXPORT_FAILED = "Fehler beim Exportieren aller Spieler."
NOTHING_TO_EXPORT = "Keine Spieler zum Exportieren gefunden."
INVALID_CREDENTIALS = "Ungültige E-Mail oder Passwort."
SIGN_IN_FAILED = "Anmeldung fehlgeschlagen. Bitte versuchen Sie es später erneut."
SESSION_EXPIRED = "Ihre Sitzung ist abgelaufen. Bitte melden Sie sich erneut an."
SELECT_TEAM_HINT = "Wählen Sie ein Team aus, um Spieler*innen zu verwalten"

__all__ = [
    "EXPORT_FAILED",
    "GENERIC_FAILURE",
    "IMPORT_FAILED",
    "IMPORT_UNREADABLE",
    "INVALID_CREDENTIALS",
    "NAMES_REQUIRED",
    "NOTHING_TO_EXPORT",
    "NOTHING_TO_IMPORT",
    "SELECT_TEAM_HINT",
    "SESSION_EXPIRED",
    "SIGN_IN_FAILED",
    "TEAM_NAME_REQUIRED",
    "TEAM_NAME_TAKEN",
]
