"""Constants for the escpos-receipt printing pipeline."""

# Receipt payload keys (camelCase, as sent by the POS front-end)
ATTR_STORE_NAME = "storeName"
ATTR_ADDRESS = "address"
ATTR_PHONE = "phone"
ATTR_ORDER_ID = "orderId"
ATTR_TIMESTAMP = "timestamp"
ATTR_ITEMS = "items"
ATTR_SUBTOTAL = "subtotal"
ATTR_DISCOUNT = "discount"
ATTR_DISCOUNT_TOTAL = "discountTotal"
ATTR_TAX = "tax"
ATTR_TOTAL = "total"
ATTR_PAYMENT_METHOD = "paymentMethod"
ATTR_CASH_RECEIVED = "cashReceived"
ATTR_CHANGE = "change"
ATTR_EXCHANGE_RATE = "exchangeRate"
ATTR_FOOTER_TEXT = "footerText"

# Line item keys
ATTR_NAME = "name"
ATTR_QUANTITY = "quantity"
ATTR_UNIT_TOTAL = "unitTotal"
ATTR_LINE_TOTAL = "lineTotal"

# Default values
DEFAULT_STORE_NAME = "Receipt"
DEFAULT_ITEM_NAME = "Unknown"
DEFAULT_PAYMENT_METHOD = "CASH"
DEFAULT_FOOTER = "Thank you for your business!"
DEFAULT_EXCHANGE_RATE = 89500
DEFAULT_ROUNDING_STEP = 5000
DEFAULT_LINE_WIDTH = 48
DEFAULT_LATIN_CODEPAGE = "CP437"
DEFAULT_ARABIC_CODEPAGE = "CP864"
# ESC t n slot holding CP864 on the 80mm printers in use
DEFAULT_ARABIC_CODEPAGE_NUMBER = 22
REPLACEMENT_BYTE = 0x3F

# Device nodes probed in order, first accessible wins
DEFAULT_DEVICE_PATHS: tuple[str, ...] = (
    "/dev/usb/lp1",
    "/dev/usb/lp0",
    "/dev/lp1",
    "/dev/lp0",
)

# Local agent
DEFAULT_AGENT_HOST = "127.0.0.1"
DEFAULT_AGENT_PORT = 4000
DEFAULT_AGENT_URL = f"http://localhost:{DEFAULT_AGENT_PORT}"
DEFAULT_SERVER_URL = "http://localhost:3000"
DEFAULT_SERVER_PRINT_PATH = "/api/print/receipt"
DEFAULT_TIMEOUT = 10.0

ENV_AGENT_HOST = "PRINTER_AGENT_HOST"
ENV_AGENT_PORT = "PRINTER_AGENT_PORT"
ENV_DEVICE_PATHS = "PRINTER_DEVICE_PATHS"
ENV_PRINTER_MODE = "PRINTER_MODE"

# Transport names reported in failures
TRANSPORT_NATIVE = "native"
TRANSPORT_AGENT = "agent"
TRANSPORT_SERVER = "server"

# Known thermal printer vendor IDs for USB diagnostics
# Source: http://www.linux-usb.org/usb.ids
THERMAL_PRINTER_VIDS: set[int] = {
    0x0404,  # NCR Corp (7167/7197 Receipt Printers)
    0x0416,  # Winbond Electronics (generic POS-58/80 printers)
    0x04B8,  # Seiko Epson Corp (TM-T88, TM-T20, TM-T70, TM-L100)
    0x0519,  # Star Micronics Co., Ltd (TSP100, TSP600, TSP700)
    0x0DD4,  # Custom Engineering SPA (K80 80mm Thermal Printer)
    0x0FE6,  # Generic POS Printers (USB Receipt Printer)
    0x1504,  # Bixolon CO LTD (SRP series)
    0x154F,  # SNBC CO., Ltd (BTP series)
    0x1D90,  # Citizen (CT-E351, PPU-700, CL-S631)
    0x2730,  # Citizen (CT-S2000/4000/310)
}
