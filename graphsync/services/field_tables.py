"""
Remote column names for every logical record field.

Lists drift between installations (internal vs. display names, encoded
spaces, casing), so several logical fields are looked up through an ordered
tuple of candidate keys. The first non-empty candidate wins; order matters.
"""

from typing import Dict, Tuple

# Identifier chains, tried in order before a record is dropped.
SERVICE_ID_FIELDS: Tuple[str, ...] = ("IDSERVIZIO", "Title")
ITEM_TITLE_FIELD = "Title"

CARD_MEMBER_TYPES = frozenset({"nuovo", "esterno"})
MEMBER_TYPE_FIELD = "TIPOLOGIASOCIO"

CARD_DESCRIPTION_FIELDS: Tuple[str, ...] = (
    "Nominativo_SOCIO",
    "NOMINATIVO_SOCIO",
)
CARD_FALLBACK_DESCRIPTION_FIELDS: Tuple[str, ...] = ("DESCRIZIONE", "TITOLO")

SURNAME_FIELD = "COGNOME"
GIVEN_NAME_FIELD = "NOME"

MEMBER_ID_PRIMARY_FIELD = "IDSOCIO"
MEMBER_ID_FIELDS: Tuple[str, ...] = (
    "ID_SOCIO",
    "IdSocio",
    "idSocio",
    "Id_Socio",
    "IDSOCIO",
    "SocioID",
    "SOCIO_ID",
    "Socio_Id",
    "socioId",
    "ID",
    "Id",
    "Title",
)

MEMBER_NAME_FIELDS: Tuple[str, ...] = ("Nominativo_SOCIO", "NOMINATIVO_SOCIO")

FISCAL_CODE_FIELDS: Tuple[str, ...] = (
    "Codice Fiscale",
    "Codice_x0020_Fiscale",
    "Codice_x0020_fiscale",
    "CODICE FISCALE",
    "CODICE_X0020_FISCALE",
    "CodiceFiscale",
    "CODICE_FISCALE",
    "Codice_Fiscale",
    "Codice fiscale",
    "CF",
    "cf",
    "Cf",
    "C_F",
    "c_f",
    "FISCALECODE",
    "FiscaleCode",
    "fiscaleCode",
    "CODICEFISCALE",
    "codicefiscale",
)

OPERATOR_FLAG_FIELDS: Tuple[str, ...] = ("OPERATORE", "Operatore", "operatore")
ACTIVE_FLAG_FIELDS: Tuple[str, ...] = ("ATTIVO", "Attivo", "attivo", "STATO")

TRUTHY_TOKENS = frozenset({"TRUE", "SI", "SÌ", "S", "1", "YES", "Y"})

# Single-column member fields: record attribute -> remote column.
MEMBER_COLUMNS: Dict[str, str] = {
    "card_number": "NUMEROTESSERA",
    "phone": "TELEFONO",
    "member_type": "TIPOLOGIASOCIO",
    "availability": "DISPONIBILITA",
    "note": "NOTAAGGIUNTIVA",
}
MEMBER_DATE_COLUMNS: Dict[str, str] = {"card_expiry": "SCADENZATESSERA"}

SERVICE_COLUMNS: Dict[str, str] = {
    "operator": "OPER",
    "counterpart_name": "TRASP",
    "service_type": "MOTIVAZIONE",
}
SERVICE_DATE_COLUMNS: Dict[str, str] = {"date": "DATA_PRELIEVO"}
SERVICE_TIME_COLUMNS: Dict[str, str] = {
    "pickup_time": "ORA_PRELIEVO",
    "dropoff_time": "ORA_DESTINAZIONE",
}

SERVICE_DETAIL_COLUMNS: Dict[str, str] = {
    "member_id": "IDSOCIO",
    "transported_person": "TRASP",
    "pickup_city": "COMUNE_PRELIEVO",
    "pickup_address": "INDIRIZZO_PRELIEVO",
    "service_type": "TIPO_SERVIZIO",
    "wheelchair": "CARROZZINA",
    "requester": "RICHIEDENTE",
    "reason": "MOTIVAZIONE",
    "dest_city": "COMUNE_DESTINAZIONE",
    "dest_address": "INDIRIZZO_DESTINAZIONE",
    "payment": "PAGAMENTO",
    "collection_status": "STATO_INCASSO",
    "operator": "OPER",
    "operator2": "OPER2",
    "vehicle": "MEZZO_USATO",
    "duration": "TEMPO",
    "distance_km": "KM",
    "payment_type": "TIPOPAGAMENTO",
    "status": "STATOSERVIZIO",
    "pickup_notes": "PRELIEVO_NOTE",
    "arrival_notes": "note_destinazione",
    "closing_notes": "NOTE_FINE_SERVIZIO",
}
SERVICE_DETAIL_DATE_COLUMNS: Dict[str, str] = {
    "pickup_date": "DATA_PRELIEVO",
    "transfer_date": "DATABONIFICO",
    "receipt_date": "DATARICEVUTA",
}
SERVICE_DETAIL_TIME_COLUMNS: Dict[str, str] = {
    "start_time": "ORA_PRELIEVO",
    "arrival_time": "ORA_DESTINAZIONE",
}

# Logical names accepted by partial updates -> SharePoint internal names.
UPDATE_FIELD_MAP: Dict[str, str] = {
    "operator": "Operatore",
    "date": "Data",
    "counterpart_name": "TRASP",
    "pickup_time": "OraSottoCasa",
    "dropoff_time": "OraDestinazione",
    "service_type": "TipoServizio",
}

SERVICE_DATE_FIELD = "DATA_PRELIEVO"
SERVICE_CREATED_FIELD = "Created"
