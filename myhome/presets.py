from decimal import Decimal

DISCLAIMER = (
    "Simulación referencial generada con los parámetros registrados por el asesor. "
    "Las tasas, bonos y condiciones finales dependen de la evaluación de la entidad financiera "
    "y del Fondo MIVIVIENDA; la TCEA mostrada incluye seguros y comisiones vigentes a la fecha."
)

DEFAULT_PROGRAM_NAME = "NUEVO_CREDITO_MIVIVIENDA"
PROGRAM_NAME_MARKER = "MIVIVIENDA"

MIN_DOWN_PAYMENT_PCT = Decimal("0.10")
MIN_TERM_MONTHS = 60
MAX_TERM_MONTHS = 300

DEFAULT_RATE_TYPE = "EFFECTIVE"
DEFAULT_GRACE_TYPE = "TOTAL"
DEFAULT_GRACE_MONTHS = "0"

STEP_KEYS = {
    1: "step_client_property",
    2: "step_initial_payment",
    3: "step_rate_institution",
    4: "step_term_grace",
    5: "step_results",
}

SUBSIDY_LABELS = {
    "BONO_BUEN_PAGADOR": "Bono del Buen Pagador",
    "BFH_COMPRA": "Bono Familiar Habitacional - Compra",
    "BFH_CONSTRUCCION": "Bono Familiar Habitacional - Construcción",
    "BFH_MEJORA": "Bono Familiar Habitacional - Mejoramiento",
    "BONO_INTEGRADOR": "Bono Integrador",
    "BONO_VERDE": "Bono Verde",
}

CENT = Decimal("0.01")
