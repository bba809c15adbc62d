"""
Column table for the GIAS "all establishments" extract.

Configuration data, not logic: one entry per CSV column, in the physical
column order of the file. Each entry is

    (raw CSV header, column id, display label[, parse directive])

No directive means the column is read as a plain string. Identifier-like
columns that look numeric (URN, LA code, UKPRN, UPRN, telephone number and
similar) carry an explicit STRING directive: they are identifiers, not
measurements, and must keep leading zeros and "+" prefixes.

Labels adapted from
https://www.get-information-schools.service.gov.uk/Guidance/EstablishmentBulkUpdate
"""

from datetime import date

from parse_rules import DATE, FLOAT, INTEGER, STRING

# (publication date, resource file name), oldest first.
RELEASE_FILES: list[tuple[date, str]] = [
    (date(2023, 4, 21), "edubasealldata20230421.csv"),
    (date(2023, 8, 17), "edubasealldata20230817.csv"),
    (date(2023, 9, 18), "edubasealldata20230918.csv"),
    (date(2024, 5, 24), "edubasealldata20240524.csv"),
]

EDUBASEALL_COLUMNS: list[tuple] = [
    ("URN",                              "urn",                              "URN",                                        STRING),
    ("LA (code)",                        "la_code",                          "LA (code)",                                  STRING),
    ("LA (name)",                        "la_name",                          "LA"),
    ("EstablishmentNumber",              "establishment_number",             "Establishment Number",                       STRING),
    ("EstablishmentName",                "establishment_name",               "School / College Name"),
    ("TypeOfEstablishment (code)",       "type_of_establishment_code",       "Establishment type (code)",                  INTEGER),
    ("TypeOfEstablishment (name)",       "type_of_establishment_name",       "Establishment type"),
    ("EstablishmentTypeGroup (code)",    "establishment_type_group_code",    "Establishment type group (code)",            INTEGER),
    ("EstablishmentTypeGroup (name)",    "establishment_type_group_name",    "Establishment type group"),
    ("EstablishmentStatus (code)",       "establishment_status_code",        "Establishment status (code)",                INTEGER),
    ("EstablishmentStatus (name)",       "establishment_status_name",        "Establishment status"),
    ("ReasonEstablishmentOpened (code)", "reason_establishment_opened_code", "Reason establishment opened (code)",         INTEGER),
    ("ReasonEstablishmentOpened (name)", "reason_establishment_opened_name", "Reason establishment opened"),
    ("OpenDate",                         "open_date",                        "Open date",                                  DATE),
    ("ReasonEstablishmentClosed (code)", "reason_establishment_closed_code", "Reason establishment closed (code)",         INTEGER),
    ("ReasonEstablishmentClosed (name)", "reason_establishment_closed_name", "Reason establishment closed"),
    ("CloseDate",                        "close_date",                       "Close date",                                 DATE),
    ("PhaseOfEducation (code)",          "phase_of_education_code",          "Phase of education (code)",                  INTEGER),
    ("PhaseOfEducation (name)",          "phase_of_education_name",          "Phase of education"),
    ("StatutoryLowAge",                  "statutory_low_age",                "Age range (low)",                            INTEGER),
    ("StatutoryHighAge",                 "statutory_high_age",               "Age range (high)",                           INTEGER),
    ("Boarders (code)",                  "boarders_code",                    "Boarders (code)",                            INTEGER),
    ("Boarders (name)",                  "boarders_name",                    "Boarders"),
    ("NurseryProvision (name)",          "nursery_provision_name",           "Nursery provision"),
    ("OfficialSixthForm (code)",         "official_sixth_form_code",         "Official sixth form (code)",                 INTEGER),
    ("OfficialSixthForm (name)",         "official_sixth_form_name",         "Official sixth form"),
    ("Gender (code)",                    "gender_code",                      "Gender of entry (code)",                     INTEGER),
    ("Gender (name)",                    "gender_name",                      "Gender of entry"),
    ("ReligiousCharacter (code)",        "religious_character_code",         "Religious character (code)",                 INTEGER),
    ("ReligiousCharacter (name)",        "religious_character_name",         "Religious character"),
    ("ReligiousEthos (name)",            "religious_ethos_name",             "Religious ethos"),
    ("Diocese (code)",                   "diocese_code",                     "Diocese (code)"),
    ("Diocese (name)",                   "diocese_name",                     "Diocese"),
    ("AdmissionsPolicy (code)",          "admissions_policy_code",           "Admissions policy (code)",                   INTEGER),
    ("AdmissionsPolicy (name)",          "admissions_policy_name",           "Admissions policy"),
    ("SchoolCapacity",                   "school_capacity",                  "School capacity",                            INTEGER),
    ("SpecialClasses (code)",            "special_classes_code",             "Special classes (code)",                     INTEGER),
    ("SpecialClasses (name)",            "special_classes_name",             "Special classes"),
    ("CensusDate",                       "census_date",                      "Census date",                                DATE),
    ("NumberOfPupils",                   "number_of_pupils",                 "Number of pupils",                           INTEGER),
    ("NumberOfBoys",                     "number_of_boys",                   "Number of boys",                             INTEGER),
    ("NumberOfGirls",                    "number_of_girls",                  "Number of girls",                            INTEGER),
    ("PercentageFSM",                    "percentage_fsm",                   "Percentage FSM",                             FLOAT),
    ("TrustSchoolFlag (code)",           "trust_school_flag_code",           "Trust school flag (code)",                   INTEGER),
    ("TrustSchoolFlag (name)",           "trust_school_flag_name",           "Trust school flag"),
    ("Trusts (code)",                    "trusts_code",                      "Academy trust or trust (code)",              INTEGER),
    ("Trusts (name)",                    "trusts_name",                      "Academy trust or trust"),
    ("SchoolSponsorFlag (name)",         "school_sponsor_flag_name",         "School sponsor flag"),
    ("SchoolSponsors (name)",            "school_sponsors_name",             "Academy sponsor"),
    ("FederationFlag (name)",            "federation_flag_name",             "Federation flag"),
    ("Federations (code)",               "federations_code",                 "Federation (code)"),
    ("Federations (name)",               "federations_name",                 "Federation"),
    ("UKPRN",                            "ukprn",                            "UK provider reference number (UKPRN)",       STRING),
    ("FEHEIdentifier",                   "fehe_identifier",                  "FEHE identifier",                            STRING),
    ("FurtherEducationType (name)",      "further_education_type_name",      "Further education type"),
    ("OfstedLastInsp",                   "ofsted_last_insp",                 "Date of last OFSTED inspection",             DATE),
    ("OfstedSpecialMeasures (code)",     "ofsted_special_measures_code",     "OFSTED special measures (code)",             INTEGER),
    ("OfstedSpecialMeasures (name)",     "ofsted_special_measures_name",     "OFSTED special measures"),
    ("LastChangedDate",                  "last_changed_date",                "Last Changed Date",                          DATE),
    ("Street",                           "street",                           "Street"),
    ("Locality",                         "locality",                         "Locality"),
    ("Address3",                         "address3",                         "Address 3"),
    ("Town",                             "town",                             "Town"),
    ("County (name)",                    "county_name",                      "County"),
    ("Postcode",                         "postcode",                         "Postcode"),
    ("SchoolWebsite",                    "school_website",                   "Website"),
    ("TelephoneNum",                     "telephone_num",                    "Telephone",                                  STRING),
    ("HeadTitle (name)",                 "head_title_name",                  "Headteacher/Principal title"),
    ("HeadFirstName",                    "head_first_name",                  "Headteacher/Principal first name"),
    ("HeadLastName",                     "head_last_name",                   "Headteacher/Principal last name"),
    ("HeadPreferredJobTitle",            "head_preferred_job_title",         "Headteacher/Principal preferred job title"),
    ("BSOInspectorateName (name)",       "bso_inspectorate_name_name",       "BSO inspectorate name"),
    ("InspectorateReport",               "inspectorate_report",              "Inspectorate report URL"),
    ("DateOfLastInspectionVisit",        "date_of_last_inspection_visit",    "Date of last inspection visit",              DATE),
    ("NextInspectionVisit",              "next_inspection_visit",            "Date of next inspection visit",              DATE),
    ("TeenMoth (name)",                  "teen_moth_name",                   "Teenage mothers"),
    ("TeenMothPlaces",                   "teen_moth_places",                 "Teenage mothers capacity",                   INTEGER),
    ("CCF (name)",                       "ccf_name",                         "Child care facilities"),
    ("SENPRU (name)",                    "senpru_name",                      "PRU provision for SEN"),
    ("EBD (name)",                       "ebd_name",                         "PRU provision for EBD"),
    ("PlacesPRU",                        "places_pru",                       "Number of PRU places",                       INTEGER),
    ("FTProv (name)",                    "ft_prov_name",                     "PRU offer full time provision"),
    ("EdByOther (name)",                 "ed_by_other_name",                 "PRU offer tuition by another provider"),
    ("Section41Approved (name)",         "section41_approved_name",          "Section 41 approved"),
    ("SEN1 (name)",                      "sen1_name",                        "SEN need 1"),
    ("SEN2 (name)",                      "sen2_name",                        "SEN need 2"),
    ("SEN3 (name)",                      "sen3_name",                        "SEN need 3"),
    ("SEN4 (name)",                      "sen4_name",                        "SEN need 4"),
    ("SEN5 (name)",                      "sen5_name",                        "SEN need 5"),
    ("SEN6 (name)",                      "sen6_name",                        "SEN need 6"),
    ("SEN7 (name)",                      "sen7_name",                        "SEN need 7"),
    ("SEN8 (name)",                      "sen8_name",                        "SEN need 8"),
    ("SEN9 (name)",                      "sen9_name",                        "SEN need 9"),
    ("SEN10 (name)",                     "sen10_name",                       "SEN need 10"),
    ("SEN11 (name)",                     "sen11_name",                       "SEN need 11"),
    ("SEN12 (name)",                     "sen12_name",                       "SEN need 12"),
    ("SEN13 (name)",                     "sen13_name",                       "SEN need 13"),
    ("TypeOfResourcedProvision (name)",  "type_of_resourced_provision_name", "Type of resourced provision"),
    ("ResourcedProvisionOnRoll",         "resourced_provision_on_roll",      "Resourced provision number on roll",         INTEGER),
    ("ResourcedProvisionCapacity",       "resourced_provision_capacity",     "Resourced provision capacity",               INTEGER),
    ("SenUnitOnRoll",                    "sen_unit_on_roll",                 "SEN unit number on roll",                    INTEGER),
    ("SenUnitCapacity",                  "sen_unit_capacity",                "SEN unit capacity",                          INTEGER),
    ("GOR (code)",                       "gor_code",                         "GOR (code)"),
    ("GOR (name)",                       "gor_name",                         "GOR"),
    ("DistrictAdministrative (code)",    "district_administrative_code",     "District administrative (code)"),
    ("DistrictAdministrative (name)",    "district_administrative_name",     "District administrative"),
    ("AdministrativeWard (code)",        "administrative_ward_code",         "Administrative ward (code)"),
    ("AdministrativeWard (name)",        "administrative_ward_name",         "Administrative ward"),
    ("ParliamentaryConstituency (code)", "parliamentary_constituency_code",  "Parliamentary constituency (code)"),
    ("ParliamentaryConstituency (name)", "parliamentary_constituency_name",  "Parliamentary constituency"),
    ("UrbanRural (code)",                "urban_rural_code",                 "Urban rural (code)"),
    ("UrbanRural (name)",                "urban_rural_name",                 "Urban rural"),
    ("GSSLACode (name)",                 "gssla_code_name",                  "GSSLA code"),
    ("Easting",                          "easting",                          "Easting",                                    INTEGER),
    ("Northing",                         "northing",                         "Northing",                                   INTEGER),
    ("MSOA (name)",                      "msoa_name",                        "MSOA"),
    ("LSOA (name)",                      "lsoa_name",                        "LSOA"),
    ("InspectorateName (name)",          "inspectorate_name_name",           "Inspectorate name"),
    ("SENStat",                          "sen_stat",                         "Number of special pupils under a SEN statement or EHCP",     INTEGER),
    ("SENNoStat",                        "sen_no_stat",                      "Number of special pupils not under a SEN statement or EHCP", INTEGER),
    ("BoardingEstablishment (name)",     "boarding_establishment_name",      "Boarding establishment"),
    ("PropsName",                        "props_name",                       "Proprietor's name"),
    ("PreviousLA (code)",                "previous_la_code",                 "Previous local authority (code)",            STRING),
    ("PreviousLA (name)",                "previous_la_name",                 "Previous local authority"),
    ("PreviousEstablishmentNumber",      "previous_establishment_number",    "Previous establishment number",              STRING),
    ("OfstedRating (name)",              "ofsted_rating_name",               "OFSTED rating"),
    ("RSCRegion (name)",                 "rsc_region_name",                  "RSC region"),
    ("Country (name)",                   "country_name",                     "Country"),
    ("UPRN",                             "uprn",                             "UPRN",                                       STRING),
    ("SiteName",                         "site_name",                        "Site name"),
    ("QABName (code)",                   "qab_name_code",                    "QAB name (code)",                            INTEGER),
    ("QABName (name)",                   "qab_name_name",                    "QAB name"),
    ("EstablishmentAccredited (code)",   "establishment_accredited_code",    "Establishment accredited (code)",            INTEGER),
    ("EstablishmentAccredited (name)",   "establishment_accredited_name",    "Establishment accredited"),
    ("QABReport",                        "qab_report",                       "QAB report",                                 STRING),
    ("CHNumber",                         "ch_number",                        "CH number",                                  STRING),
    ("MSOA (code)",                      "msoa_code",                        "MSOA (code)"),
    ("LSOA (code)",                      "lsoa_code",                        "LSOA (code)"),
    ("FSM",                              "fsm",                              "FSM",                                        INTEGER),
    ("AccreditationExpiryDate",          "accreditation_expiry_date",        "Accreditation expiry date"),
]
