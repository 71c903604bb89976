"""City/region to metro airport lookup for tournament venues.

Coverage is partial on purpose: venues that are not listed simply have no airport.
"""

from .models import Airport

_REGION_CODES = {
    'california': 'CA', 'nevada': 'NV', 'arizona': 'AZ', 'texas': 'TX', 'illinois': 'IL', 'florida': 'FL',
    'georgia': 'GA', 'north carolina': 'NC', 'south carolina': 'SC', 'oklahoma': 'OK', 'michigan': 'MI',
    'rhode island': 'RI', 'pennsylvania': 'PA', 'maryland': 'MD', 'new jersey': 'NJ', 'new york': 'NY',
    'washington': 'WA', 'oregon': 'OR', 'kansas': 'KS', 'alabama': 'AL', 'indiana': 'IN', 'ohio': 'OH',
    'massachusetts': 'MA', 'wisconsin': 'WI', 'brazil': 'BR',
}

METRO_AIRPORTS: dict[tuple[str, str], str] = {
    ('homewood', 'AL'): 'BHM',  # Birmingham
    ('gilbert', 'AZ'): 'PHX',
    ('phoenix', 'AZ'): 'PHX',
    ('tres coroas', 'BR'): 'POA',  # Porto Alegre
    # Bay Area / SoCal
    ('alameda', 'CA'): 'SFO',
    ('anaheim', 'CA'): 'LAX',
    ('burlingame', 'CA'): 'SFO',
    ('el monte', 'CA'): 'LAX',
    ('fountain valley', 'CA'): 'LAX',
    ('fremont', 'CA'): 'SFO',
    ('fullerton', 'CA'): 'LAX',
    ('milpitas', 'CA'): 'SFO',
    ('newark', 'CA'): 'SFO',
    ('sacramento', 'CA'): 'SMF',
    ('san diego', 'CA'): 'SAN',
    ('south el monte', 'CA'): 'LAX',
    ('davie', 'FL'): 'FLL',
    ('doral', 'FL'): 'MIA',
    ('jacksonville', 'FL'): 'JAX',
    ('naples', 'FL'): 'RSW',  # Fort Myers
    ('ocala', 'FL'): 'OCF',
    ('orlando', 'FL'): 'MCO',
    ('pensacola', 'FL'): 'PNS',
    ('athens', 'GA'): 'ATL',
    ('norcross', 'GA'): 'ATL',
    ('suwanee', 'GA'): 'ATL',
    ('barrington', 'IL'): 'ORD',
    ('rolling meadows', 'IL'): 'ORD',
    ('south bend', 'IN'): 'SBN',
    ('leawood', 'KS'): 'MCI',
    ('dedham', 'MA'): 'BOS',
    ('westford', 'MA'): 'BOS',
    ('jessup', 'MD'): 'BWI',
    ('brighton', 'MI'): 'DTW',
    ('clinton township', 'MI'): 'DTW',
    ('asheville', 'NC'): 'AVL',
    ('charlotte', 'NC'): 'CLT',
    ('fayetteville', 'NC'): 'FAY',
    ('dunellen', 'NJ'): 'EWR',
    ('princeton', 'NJ'): 'EWR',
    ('las vegas', 'NV'): 'LAS',
    ('rochester', 'NY'): 'ROC',
    ('columbus', 'OH'): 'CMH',
    ('plain city', 'OH'): 'CMH',
    ('bixby', 'OK'): 'TUL',
    ('tigard', 'OR'): 'PDX',
    ('erie', 'PA'): 'ERI',
    ('millersville', 'PA'): 'MDT',
    ('phoenixville', 'PA'): 'PHL',
    ('shippensburg', 'PA'): 'MDT',
    ('lincoln', 'RI'): 'PVD',
    ('columbia', 'SC'): 'CAE',
    ('allen', 'TX'): 'DFW',
    ('austin', 'TX'): 'AUS',
    ('colleyville', 'TX'): 'DFW',
    ('irving', 'TX'): 'DFW',
    ('katy', 'TX'): 'IAH',  # Houston area
    ('plano', 'TX'): 'DFW',
    ('richardson', 'TX'): 'DFW',
    ('san antonio', 'TX'): 'SAT',
    ('bellevue', 'WA'): 'SEA',
    ('redmond', 'WA'): 'SEA',
    ('shorewood', 'WI'): 'MKE',
}


def normalize_region(region: str) -> str:
    region = region.strip()
    return _REGION_CODES.get(region.lower(), region.upper())


def airport_for(city: str, region: str) -> Airport | None:
    code = METRO_AIRPORTS.get((city.strip().lower(), normalize_region(region)))
    return Airport(code) if code else None
