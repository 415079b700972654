"""
Analyte names printed by labs, keyed by slug.

Wider than the reference catalog. Each lab line is resolved to its own
analyte here first and only then looked up in the catalog, so "Hemoglobina"
never lands on Hemoglobina Glicada.
"""

ANALYTE_NAMES: dict[str, tuple[str, ...]] = {
    # Metabólico
    "insulina": ("insulina", "insulina basal", "insulina em jejum", "insulina jejum", "insulin"),
    "glicemia": ("glicose", "glicemia", "glicemia de jejum", "glicose em jejum", "glucose"),
    "hba1c": ("hemoglobina glicada", "hemoglobina glicosilada", "hba1c", "a1c", "hgba1c"),
    "homa_ir": ("homa ir", "homeostasis model assessment"),
    "homa_beta": ("homa beta",),
    "acido_urico": ("acido urico", "uric acid"),
    # Lipídico
    "triglicerideos": ("triglicerideos", "triglicerides", "triglycerides", "tg"),
    "hdl": ("hdl", "colesterol hdl", "hdl colesterol"),
    "ldl": ("ldl", "colesterol ldl", "ldl colesterol"),
    "vldl": ("vldl", "vldl colesterol"),
    "colesterol_total": ("colesterol total", "total cholesterol"),
    "colesterol_nao_hdl": ("colesterol nao hdl", "nao hdl", "non hdl cholesterol"),
    "apolipoproteina_a1": ("apolipoproteina a1", "apo a1", "apoa1"),
    "apo_b": ("apolipoproteina b", "apo b", "apob"),
    "lipoproteina_a": ("lipoproteina a", "lp a"),
    # Tireoide
    "tsh": ("tsh", "hormonio tireoestimulante", "thyroid stimulating hormone"),
    "t3_livre": ("t3 livre", "t3l", "free t3", "triiodotironina livre"),
    "t4_livre": ("t4 livre", "t4l", "free t4", "tiroxina livre"),
    "t3_reverso": ("t3 reverso", "t3r", "reverse t3"),
    "t4_total": ("t4 total", "tiroxina total"),
    "anti_tpo": ("anticorpos antiperoxidase", "anti tpo", "antitpo"),
    "anti_tg": ("anticorpos antitireoglobulina", "anti tg", "antitg"),
    # Hepático
    "gama_gt": ("gama gt", "gamma gt", "ggt", "gama glutamil transferase"),
    "tgo": ("tgo", "ast", "sgot", "aspartato aminotransferase", "transaminase oxalacetica"),
    "tgp": ("tgp", "alt", "sgpt", "alanina aminotransferase", "transaminase piruvica"),
    "fosfatase_alcalina": ("fosfatase alcalina", "alkaline phosphatase", "alp"),
    "bilirrubina_total": ("bilirrubina total",),
    "bilirrubina_direta": ("bilirrubina direta",),
    "bilirrubina_indireta": ("bilirrubina indireta",),
    "albumina": ("albumina", "albumin"),
    "proteina_total": ("proteina total", "proteinas totais", "total protein"),
    # Renal
    "creatinina": ("creatinina", "creatinine"),
    "ureia": ("ureia", "urea", "bun"),
    "taxa_filtracao_glomerular": ("taxa de filtracao glomerular", "tfg", "egfr"),
    # Hematológico
    "ferritina": ("ferritina", "ferritin"),
    "ferro_serico": ("ferro", "ferro serico", "serum iron"),
    "hemoglobina": ("hemoglobina", "hemoglobin", "hb"),
    "hematocrito": ("hematocrito", "hematocrit", "ht"),
    "hemacias": ("hemacias", "eritrocitos", "red blood cells", "rbc"),
    "leucocitos": ("leucocitos", "white blood cells", "wbc"),
    "plaquetas": ("plaquetas", "platelets", "plt"),
    "vcm": ("vcm", "volume corpuscular medio", "mcv"),
    "hcm": ("hcm", "hemoglobina corpuscular media", "mch"),
    "chcm": ("chcm", "concentracao de hemoglobina corpuscular media", "mchc"),
    "rdw": ("rdw", "red cell distribution width"),
    "vmp": ("vmp", "volume plaquetario medio", "mpv"),
    "neutrofilos": ("neutrofilos", "segmentados", "neutrophils"),
    "linfocitos": ("linfocitos", "lymphocytes"),
    "monocitos": ("monocitos", "monocytes"),
    "eosinofilos": ("eosinofilos", "eosinophils"),
    "basofilos": ("basofilos", "basophils"),
    "bastonetes": ("bastonetes", "band cells"),
    # Inflamação
    "homocisteina": ("homocisteina", "homocysteine"),
    "pcr_us": ("pcr ultrassensivel", "pcr ultra sensivel", "pcr us", "hs crp", "proteina c reativa ultrassensivel"),
    "pcr": ("pcr", "proteina c reativa", "crp"),
    "fibrinogenio": ("fibrinogenio", "fibrinogen"),
    # Vitaminas e minerais
    "vitamina_d3": ("vitamina d", "vitamina d3", "25 oh vitamina d", "25 hidroxivitamina d", "vitamin d"),
    "vitamina_b12": ("vitamina b12", "cobalamina", "vitamin b12"),
    "vitamina_c": ("vitamina c", "acido ascorbico", "vitamin c"),
    "acido_folico": ("acido folico", "folato", "folic acid"),
    "zinco": ("zinco", "zinco serico", "zinc"),
    "magnesio": ("magnesio", "magnesium"),
    "sodio": ("sodio", "sodium"),
    "potassio": ("potassio", "potassium"),
    "calcio": ("calcio", "calcio ionico", "calcium"),
    # Hormônios
    "cortisol_manha": ("cortisol", "cortisol matinal", "cortisol manha"),
    "testosterona_total": ("testosterona", "testosterona total", "testosterone"),
    "testosterona_livre": ("testosterona livre", "free testosterone"),
    "estradiol": ("estradiol",),
    "progesterona": ("progesterona", "progesterone"),
    "dht": ("dht", "dihidrotestosterona"),
    "shbg": ("shbg", "globulina ligadora de hormonios sexuais"),
    "dhea_s": ("dhea s", "sdhea", "sulfato de dehidroepiandrosterona"),
    "lh": ("lh", "hormonio luteinizante"),
    "fsh": ("fsh", "hormonio foliculo estimulante"),
    "paratormonio": ("paratormonio", "pth"),
    "psa_total": ("psa total",),
    "psa_livre": ("psa livre",),
    # Fisiologia e composição corporal
    "vo2_max": ("vo2 maximo", "vo2 max", "vo2max"),
    "forca_preensao": ("forca de preensao manual", "preensao manual", "handgrip"),
    "peso_corporal": ("peso", "peso corporal", "body weight"),
    "imc": ("imc", "indice de massa corporal", "bmi"),
    "percentual_gordura": ("percentual de gordura corporal", "pgc", "body fat percentage"),
    "gordura_visceral": ("gordura visceral", "nivel de gordura visceral", "visceral fat level"),
}
