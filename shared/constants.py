"""
Game constants for the companion client.
All monetary values are in game dollars.
"""

BOARD_SIZE = 40

# The bank starts with this much cash; its balance is derived from the
# transaction log rather than stored.
INITIAL_BANK_BALANCE = 20580

# Houses and Hotels
MAX_HOUSES_PER_PROPERTY = 4
MAX_HOTELS_PER_PROPERTY = 1

# Market exposes this many card slots
MARKET_SLOTS = 3

# Board spaces
# Format: (position, name, type)
BOARD_SPACES = [
    (0, "Salida", "corner"),
    (1, "Avenida Mediterráneo", "property"),
    (2, "Arca Comunal", "chest"),
    (3, "Avenida Báltica", "property"),
    (4, "Impuesto sobre Ingresos", "tax"),
    (5, "Ferrocarril Reading", "transport"),
    (6, "Avenida Oriental", "property"),
    (7, "Fortuna", "chance"),
    (8, "Avenida Vermont", "property"),
    (9, "Avenida Connecticut", "property"),
    (10, "En la Cárcel / De Visita", "corner"),
    (11, "Plaza San Carlos", "property"),
    (12, "Compañía de Electricidad", "utility"),
    (13, "Avenida Estados", "property"),
    (14, "Avenida Virginia", "property"),
    (15, "Ferrocarril Pennsylvania", "transport"),
    (16, "Plaza St. James", "property"),
    (17, "Arca Comunal", "chest"),
    (18, "Avenida Tennessee", "property"),
    (19, "Avenida Nueva York", "property"),
    (20, "Parada Libre", "corner"),
    (21, "Avenida Kentucky", "property"),
    (22, "Fortuna", "chance"),
    (23, "Avenida Indiana", "property"),
    (24, "Avenida Illinois", "property"),
    (25, "Ferrocarril B. & O.", "transport"),
    (26, "Avenida Atlántico", "property"),
    (27, "Avenida Ventnor", "property"),
    (28, "Compañía de Agua", "utility"),
    (29, "Jardines Marvin", "property"),
    (30, "Váyase a la Cárcel", "corner"),
    (31, "Avenida Pacífico", "property"),
    (32, "Avenida Carolina del Norte", "property"),
    (33, "Arca Comunal", "chest"),
    (34, "Avenida Pennsylvania", "property"),
    (35, "Ferrocarril Vía Rápida", "transport"),
    (36, "Fortuna", "chance"),
    (37, "Plaza Park", "property"),
    (38, "Impuesto de Lujo", "tax"),
    (39, "El Muelle", "property"),
]
