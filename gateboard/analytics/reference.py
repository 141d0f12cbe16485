"""
Static reference data for the route and fleet views.

European destination airports (IATA code to name and country) and the
KLM fleet's aircraft codes (IATA main or sub type to manufacturer and
seat count).
"""

from typing import Dict, NamedTuple, Optional


class Airport(NamedTuple):
    name: str
    country: str


EUROPEAN_AIRPORTS: Dict[str, Airport] = {
    # United Kingdom
    'LHR': Airport('London Heathrow', 'United Kingdom'),
    'LCY': Airport('London City', 'United Kingdom'),
    'LGW': Airport('London Gatwick', 'United Kingdom'),
    'STN': Airport('London Stansted', 'United Kingdom'),
    'MAN': Airport('Manchester', 'United Kingdom'),
    'BHX': Airport('Birmingham', 'United Kingdom'),
    'EDI': Airport('Edinburgh', 'United Kingdom'),
    'BRS': Airport('Bristol', 'United Kingdom'),
    'NCL': Airport('Newcastle', 'United Kingdom'),
    'LPL': Airport('Liverpool', 'United Kingdom'),
    'GLA': Airport('Glasgow', 'United Kingdom'),
    'ABZ': Airport('Aberdeen', 'United Kingdom'),
    'NWI': Airport('Norwich', 'United Kingdom'),
    'HUY': Airport('Humberside', 'United Kingdom'),
    'LBA': Airport('Leeds Bradford', 'United Kingdom'),
    'CWL': Airport('Cardiff', 'United Kingdom'),
    'BHD': Airport('Belfast City', 'United Kingdom'),
    'INV': Airport('Inverness', 'United Kingdom'),
    'SOU': Airport('Southampton', 'United Kingdom'),
    'TYN': Airport('Teesside', 'United Kingdom'),

    # Germany
    'FRA': Airport('Frankfurt', 'Germany'),
    'MUC': Airport('Munich', 'Germany'),
    'BER': Airport('Berlin Brandenburg', 'Germany'),
    'DUS': Airport('Düsseldorf', 'Germany'),
    'HAM': Airport('Hamburg', 'Germany'),
    'CGN': Airport('Cologne', 'Germany'),
    'STR': Airport('Stuttgart', 'Germany'),
    'NUE': Airport('Nuremberg', 'Germany'),
    'LEJ': Airport('Leipzig', 'Germany'),
    'DRS': Airport('Dresden', 'Germany'),
    'HAJ': Airport('Hanover', 'Germany'),
    'BRE': Airport('Bremen', 'Germany'),

    # France
    'CDG': Airport('Paris Charles de Gaulle', 'France'),
    'ORY': Airport('Paris Orly', 'France'),
    'NCE': Airport('Nice', 'France'),
    'LYS': Airport('Lyon', 'France'),
    'MRS': Airport('Marseille', 'France'),
    'TLS': Airport('Toulouse', 'France'),
    'BOD': Airport('Bordeaux', 'France'),
    'NTE': Airport('Nantes', 'France'),
    'LIL': Airport('Lille', 'France'),
    'BSL': Airport('Basel-Mulhouse', 'France'),

    # Spain
    'MAD': Airport('Madrid Barajas', 'Spain'),
    'BCN': Airport('Barcelona', 'Spain'),
    'PMI': Airport('Palma de Mallorca', 'Spain'),
    'AGP': Airport('Malaga', 'Spain'),
    'ALC': Airport('Alicante', 'Spain'),
    'IBZ': Airport('Ibiza', 'Spain'),
    'VLC': Airport('Valencia', 'Spain'),
    'BIO': Airport('Bilbao', 'Spain'),
    'SVQ': Airport('Seville', 'Spain'),

    # Italy
    'FCO': Airport('Rome Fiumicino', 'Italy'),
    'MXP': Airport('Milan Malpensa', 'Italy'),
    'LIN': Airport('Milan Linate', 'Italy'),
    'VCE': Airport('Venice', 'Italy'),
    'NAP': Airport('Naples', 'Italy'),
    'PSA': Airport('Pisa', 'Italy'),
    'BLQ': Airport('Bologna', 'Italy'),
    'TRN': Airport('Turin', 'Italy'),
    'FLR': Airport('Florence', 'Italy'),

    # Benelux
    'EIN': Airport('Eindhoven', 'Netherlands'),
    'RTM': Airport('Rotterdam', 'Netherlands'),
    'BRU': Airport('Brussels', 'Belgium'),
    'LUX': Airport('Luxembourg', 'Luxembourg'),

    # Switzerland and Austria
    'ZRH': Airport('Zurich', 'Switzerland'),
    'GVA': Airport('Geneva', 'Switzerland'),
    'VIE': Airport('Vienna', 'Austria'),
    'SZG': Airport('Salzburg', 'Austria'),
    'INN': Airport('Innsbruck', 'Austria'),

    # Nordics
    'CPH': Airport('Copenhagen', 'Denmark'),
    'BLL': Airport('Billund', 'Denmark'),
    'AAL': Airport('Aalborg', 'Denmark'),
    'ARN': Airport('Stockholm Arlanda', 'Sweden'),
    'GOT': Airport('Gothenburg', 'Sweden'),
    'OSL': Airport('Oslo', 'Norway'),
    'BGO': Airport('Bergen', 'Norway'),
    'SVG': Airport('Stavanger', 'Norway'),
    'TRD': Airport('Trondheim', 'Norway'),
    'HEL': Airport('Helsinki', 'Finland'),
    'KEF': Airport('Reykjavik', 'Iceland'),

    # Ireland
    'DUB': Airport('Dublin', 'Ireland'),
    'ORK': Airport('Cork', 'Ireland'),

    # Portugal and Greece
    'LIS': Airport('Lisbon', 'Portugal'),
    'OPO': Airport('Porto', 'Portugal'),
    'FAO': Airport('Faro', 'Portugal'),
    'ATH': Airport('Athens', 'Greece'),
    'SKG': Airport('Thessaloniki', 'Greece'),

    # Central and eastern Europe
    'WAW': Airport('Warsaw', 'Poland'),
    'KRK': Airport('Krakow', 'Poland'),
    'GDN': Airport('Gdańsk', 'Poland'),
    'WRO': Airport('Wrocław', 'Poland'),
    'PRG': Airport('Prague', 'Czech Republic'),
    'BUD': Airport('Budapest', 'Hungary'),
    'OTP': Airport('Bucharest', 'Romania'),
    'SOF': Airport('Sofia', 'Bulgaria'),
    'ZAG': Airport('Zagreb', 'Croatia'),
    'SPU': Airport('Split', 'Croatia'),
    'LJU': Airport('Ljubljana', 'Slovenia'),
    'BEG': Airport('Belgrade', 'Serbia'),
    'VNO': Airport('Vilnius', 'Lithuania'),
    'RIX': Airport('Riga', 'Latvia'),
    'TLL': Airport('Tallinn', 'Estonia'),
    'KBP': Airport('Kyiv Boryspil', 'Ukraine'),

    # Mediterranean islands
    'MLA': Airport('Malta', 'Malta'),
    'LCA': Airport('Larnaca', 'Cyprus'),
}


class AircraftSpec(NamedTuple):
    manufacturer: str
    seats: int


AIRCRAFT_TYPES: Dict[str, AircraftSpec] = {
    # Airbus
    '332': AircraftSpec('Airbus', 268),   # A330-200
    '333': AircraftSpec('Airbus', 292),   # A330-300
    '32N': AircraftSpec('Airbus', 180),   # A320neo
    '32Q': AircraftSpec('Airbus', 232),   # A321neo
    'A332': AircraftSpec('Airbus', 268),
    'A333': AircraftSpec('Airbus', 292),
    'A32N': AircraftSpec('Airbus', 180),
    'A32Q': AircraftSpec('Airbus', 232),

    # Boeing
    '772': AircraftSpec('Boeing', 314),   # 777-200ER
    '773': AircraftSpec('Boeing', 408),   # 777-300ER
    '77W': AircraftSpec('Boeing', 408),
    '789': AircraftSpec('Boeing', 290),   # 787-9
    '78W': AircraftSpec('Boeing', 335),   # 787-10
    '781': AircraftSpec('Boeing', 335),
    '73H': AircraftSpec('Boeing', 126),   # 737-700
    '738': AircraftSpec('Boeing', 162),   # 737-800
    '73W': AircraftSpec('Boeing', 178),   # 737-900
    '73J': AircraftSpec('Boeing', 178),
    '295': AircraftSpec('Boeing', 178),
    'B772': AircraftSpec('Boeing', 314),
    'B773': AircraftSpec('Boeing', 408),
    'B789': AircraftSpec('Boeing', 290),
    'B738': AircraftSpec('Boeing', 162),

    # Embraer (KLM Cityhopper)
    'E70': AircraftSpec('Embraer', 76),   # E170
    'E75': AircraftSpec('Embraer', 82),   # E175
    'E90': AircraftSpec('Embraer', 96),   # E190
    'E7W': AircraftSpec('Embraer', 120),  # E195-E2
    'E170': AircraftSpec('Embraer', 76),
    'E175': AircraftSpec('Embraer', 82),
    'E190': AircraftSpec('Embraer', 96),
    'E195': AircraftSpec('Embraer', 120),
}


def european_airport(code: Optional[str]) -> Optional[Airport]:
    return EUROPEAN_AIRPORTS.get(code) if code else None


def aircraft_manufacturer(code: str) -> str:
    info = AIRCRAFT_TYPES.get(code)
    return info.manufacturer if info else 'Unknown'


def aircraft_seats(code: str) -> Optional[int]:
    info = AIRCRAFT_TYPES.get(code)
    return info.seats if info else None
