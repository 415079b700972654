import json
import logging
from uuid import NAMESPACE_URL, uuid5

from sqlalchemy.orm import Session

from logical_brain.database import SessionLocal
from logical_brain.models.biomarker import BiomarkerReference, CalculatedMetric
from logical_brain.models.protocol import ProtocolRecord

logger = logging.getLogger(__name__)

KATIA = "Dra. Katia Haranaka"
FRECCIA = "Dr. Guilherme Freccia"
FUNCIONAL = "Medicina Funcional"


BIOMARKERS = [
    {
        "slug": "insulina", "name": "Insulina em Jejum", "category": "Metabólico", "unit": "uUI/mL",
        "optimal_max": 8.0, "lab_max": 23.0,
        "clinical_insight": "Marcador principal de resistência insulínica. Valores acima de 8 indicam que o pâncreas está sobrecarregado.",
        "metaphor": "A insulina é a carriola que leva o açúcar. Se tem muitas carriolas, o trânsito está engarrafado.",
        "source_ref": KATIA, "aliases": ["Insulina", "Insulina Basal"],
    },
    {
        "slug": "glicemia", "name": "Glicemia de Jejum", "category": "Metabólico", "unit": "mg/dL",
        "optimal_min": 70.0, "optimal_max": 85.0, "lab_max": 99.0,
        "clinical_insight": "Acima de 90 já indica excesso de carboidratos recentes. É um parâmetro facilmente mascarado por jejum curto.",
        "source_ref": KATIA, "aliases": ["Glicose", "Glicose em Jejum"],
    },
    {
        "slug": "hba1c", "name": "Hemoglobina Glicada", "category": "Metabólico", "unit": "%",
        "optimal_max": 5.4, "lab_max": 5.7,
        "clinical_insight": "Média glicêmica dos últimos 3 meses. Indica o grau de \"caramelização\" (glicação) das proteínas.",
        "metaphor": "Mede o quanto seu sangue virou \"cola plástica\".",
        "source_ref": KATIA, "aliases": ["HbA1c", "Hemoglobina Glicosilada"],
    },
    {
        "slug": "tsh", "name": "TSH", "category": "Tireoide", "unit": "uUI/mL",
        "optimal_min": 1.0, "optimal_max": 2.0, "lab_max": 4.5,
        "clinical_insight": "Hormônio cerebral. Valores acima de 2.0 já sugerem hipotireoidismo tecidual ou dificuldade de conversão.",
        "source_ref": KATIA, "aliases": ["Hormônio Tireoestimulante"],
    },
    {
        "slug": "t3_livre", "name": "T3 Livre", "category": "Tireoide", "unit": "pg/mL",
        "optimal_min": 3.3, "optimal_max": 4.2,
        "clinical_insight": "Hormônio da vida e beleza. Níveis baixos causam depressão, queda de cabelo e metabolismo lento.",
        "metaphor": "O T3 é o cirurgião plástico do corpo.",
        "source_ref": KATIA, "aliases": ["Triiodotironina Livre", "FT3"],
    },
    {
        "slug": "t3_reverso", "name": "T3 Reverso", "category": "Tireoide", "unit": "ng/dL",
        "optimal_max": 12.0,
        "clinical_insight": "Bloqueador metabólico. Aumenta em estresse, jejum prolongado ou inflamação.",
        "metaphor": "Hormônio da hibernação. O corpo acha que é inverno e guarda gordura.",
        "source_ref": KATIA, "aliases": ["Reverse T3"],
    },
    {
        "slug": "ferritina", "name": "Ferritina", "category": "Hematológico", "unit": "ng/mL",
        "optimal_min": 70.0, "optimal_max": 150.0, "lab_min": 15.0,
        "clinical_insight": "Reserva de ferro. Abaixo de 70 impede a conversão de T4 em T3 na tireoide. Acima de 200 oxida o fígado.",
        "metaphor": "Bateria do corpo. Sem carga, o corpo desliga a \"decoração\" (cabelo/unha).",
        "source_ref": KATIA, "aliases": [],
    },
    {
        "slug": "gama_gt", "name": "Gama GT", "category": "Hepático", "unit": "U/L",
        "optimal_max": 16.0, "lab_max": 40.0,
        "clinical_insight": "Marcador mais sensível de agressão hepática (álcool/toxinas). Acima de 16 já indica sofrimento.",
        "metaphor": "O fígado inchado deixa o \"estômago alto\" e o corpo em formato de maçã.",
        "source_ref": KATIA, "aliases": ["GGT", "Gama Glutamil Transferase"],
    },
    {
        "slug": "tgo", "name": "TGO (AST)", "category": "Hepático", "unit": "U/L",
        "optimal_max": 18.0,
        "clinical_insight": "Indica morte celular (hepatólise). Deve ser baixo.",
        "source_ref": KATIA, "aliases": ["TGO", "AST", "Aspartato Aminotransferase", "Transaminase Oxalacética"],
    },
    {
        "slug": "triglicerideos", "name": "Triglicerídeos", "category": "Lipídico", "unit": "mg/dL",
        "optimal_max": 80.0,
        "clinical_insight": "Estoque de energia vindo de carboidratos simples e álcool. Principal vilão cardiovascular.",
        "source_ref": KATIA, "aliases": ["Triglicérides"],
    },
    {
        "slug": "hdl", "name": "HDL Colesterol", "category": "Lipídico", "unit": "mg/dL",
        "optimal_min": 60.0,
        "clinical_insight": "Proteção cardiovascular. Abaixo de 50 é risco.",
        "metaphor": "O caminhão de lixo que limpa as artérias.",
        "source_ref": KATIA, "aliases": ["HDL", "Colesterol HDL"],
    },
    {
        "slug": "creatinina", "name": "Creatinina", "category": "Renal", "unit": "mg/dL",
        "optimal_min": 0.7, "optimal_max": 0.9,
        "clinical_insight": "Acima de 1.0 indica sobrecarga renal ou desidratação crônica.",
        "metaphor": "O filtro de café sujo. Precisa de água constante para lavar.",
        "source_ref": KATIA, "aliases": [],
    },
    {
        "slug": "homocisteina", "name": "Homocisteína", "category": "Inflamação", "unit": "umol/L",
        "optimal_max": 7.0,
        "clinical_insight": "Marcador de metilação. Alta correlaciona com risco de AVC, Alzheimer e infarto.",
        "source_ref": KATIA, "aliases": [],
    },
    {
        "slug": "pcr_us", "name": "PCR Ultra-Sensível", "category": "Inflamação", "unit": "mg/L",
        "optimal_max": 0.5,
        "clinical_insight": "Inflamação vascular. Deve ser próximo de zero.",
        "source_ref": KATIA, "aliases": ["Proteína C Reativa Ultrassensível", "PCR-us", "hs-CRP"],
    },
    {
        "slug": "vo2_max", "name": "VO2 Máximo", "category": "Fisiologia", "unit": "ml/kg/min",
        "optimal_min": 35.0,
        "clinical_insight": "O mais forte preditor de longevidade. Valores baixos têm risco de mortalidade maior que tabagismo.",
        "source_ref": FRECCIA, "aliases": ["VO2max"],
    },
    {
        "slug": "forca_preensao", "name": "Força de Preensão Manual", "category": "Fisiologia", "unit": "kg",
        "clinical_insight": "Marcador de funcionalidade e robustez em idosos. Baixa força indica sarcopenia e fragilidade.",
        "source_ref": FRECCIA, "aliases": ["Preensão Manual"],
    },
    {
        "slug": "vitamina_d3", "name": "Vitamina D3", "category": "Imunidade", "unit": "ng/mL",
        "optimal_min": 50.0, "optimal_max": 80.0, "lab_min": 20.0,
        "metaphor": "O maestro da imunidade e proteção anticâncer.",
        "source_ref": KATIA, "aliases": ["Vitamina D", "25-OH Vitamina D", "25-Hidroxivitamina D"],
    },
    {
        "slug": "vitamina_b12", "name": "Vitamina B12", "category": "Cérebro", "unit": "pg/mL",
        "optimal_min": 600.0,
        "metaphor": "Combustível da cognição e da bainha de mielina.",
        "source_ref": KATIA, "aliases": ["Cobalamina"],
    },
    {
        "slug": "lipoproteina_a", "name": "Lipoproteína (a)", "category": "Cardiovascular", "unit": "nmol/L",
        "optimal_max": 30.0, "lab_max": 75.0,
        "clinical_insight": "Marcador genético de risco cardíaco e trombose. Não responde bem a dieta/estatinas. Valores altos exigem controle rigoroso de outros fatores (inflamação/oxidação).",
        "source_ref": FUNCIONAL, "aliases": ["Lp(a)"],
    },
    {
        "slug": "acido_urico", "name": "Ácido Úrico", "category": "Metabólico", "unit": "mg/dL",
        "optimal_max": 4.5, "lab_max": 7.0,
        "clinical_insight": "Não é só gota. É um marcador de estresse oxidativo e resistência à insulina (frutose). Valores acima de 5.0 já indicam risco cardiovascular aumentado.",
        "source_ref": KATIA, "aliases": [],
    },
    {
        "slug": "fibrinogenio", "name": "Fibrinogênio", "category": "Inflamação/Coagulação", "unit": "mg/dL",
        "optimal_min": 200.0, "optimal_max": 300.0, "lab_max": 393.0,
        "clinical_insight": "Marcador de viscosidade do sangue e inflamação. Valores altos aumentam risco de trombose e infarto (\"sangue grosso\").",
        "source_ref": FUNCIONAL, "aliases": [],
    },
    {
        "slug": "apo_b", "name": "Apolipoproteína B", "category": "Cardiovascular", "unit": "mg/dL",
        "optimal_max": 80.0, "lab_max": 100.0,
        "clinical_insight": "Conta o número real de partículas aterogênicas (LDL, VLDL). Mais preciso que o colesterol LDL calculado.",
        "source_ref": "Medicina de Precisão", "aliases": ["ApoB", "Apo B"],
    },
    {
        "slug": "testosterona_total", "name": "Testosterona Total", "category": "Hormônios", "unit": "ng/dL",
        "optimal_min": 600.0, "optimal_max": 900.0, "lab_min": 249.0,
        "clinical_insight": "Vitalidade, força e proteção cardíaca. Valores de laboratório \"normais\" (ex: 300) são insuficientes para saúde ótima em homens.",
        "source_ref": FRECCIA, "aliases": [],
    },
    {
        "slug": "testosterona_livre", "name": "Testosterona Livre", "category": "Hormônios", "unit": "ng/dL",
        "optimal_min": 12.0,
        "clinical_insight": "A fração que realmente funciona. Se a SHBG for alta, a livre cai, causando sintomas mesmo com Total normal.",
        "source_ref": FRECCIA, "aliases": [],
    },
    {
        "slug": "estradiol", "name": "Estradiol (E2)", "category": "Hormônios", "unit": "pg/mL",
        "optimal_min": 20.0, "optimal_max": 30.0,
        "clinical_insight": "Em homens, o excesso causa gordura abdominal e perda de libido. A falta causa risco ósseo e cardíaco. O equilíbrio é chave.",
        "source_ref": FUNCIONAL, "aliases": ["Estradiol"],
    },
    {
        "slug": "shbg", "name": "SHBG", "category": "Hormônios", "unit": "nmol/L",
        "optimal_min": 20.0, "optimal_max": 40.0,
        "clinical_insight": "Proteína que \"prende\" a testosterona. Se estiver muito alta (ex: insulina baixa demais ou envelhecimento), rouba a testosterona livre.",
        "source_ref": FUNCIONAL, "aliases": ["Globulina Ligadora de Hormônios Sexuais"],
    },
    {
        "slug": "progesterona", "name": "Progesterona", "category": "Hormônios", "unit": "ng/mL",
        "optimal_max": 0.15,
        "clinical_insight": "Em homens, níveis elevados podem inibir a testosterona ou indicar conversão adrenal alterada.",
        "source_ref": FUNCIONAL, "aliases": [],
    },
    {
        "slug": "cortisol_manha", "name": "Cortisol (Manhã)", "category": "Hormônios/Estresse", "unit": "ug/dL",
        "optimal_min": 10.0, "optimal_max": 18.0,
        "clinical_insight": "Hormônio da vida. Baixo demais = burnout/fadiga adrenal. Alto demais = estresse agudo/catabolismo muscular.",
        "source_ref": FUNCIONAL, "aliases": ["Cortisol", "Cortisol Matinal"],
    },
    {
        "slug": "leucocitos", "name": "Leucócitos Totais", "category": "Imunidade", "unit": "/mm3",
        "optimal_min": 5000.0, "optimal_max": 7500.0,
        "clinical_insight": "Sistema de defesa. Abaixo de 5000 pode indicar baixa reserva imunológica ou infecções virais crônicas. Acima de 10000, infecção aguda.",
        "source_ref": KATIA, "aliases": ["Leucócitos"],
    },
    {
        "slug": "vcm", "name": "VCM (Volume Corpuscular Médio)", "category": "Hematológico", "unit": "fL",
        "optimal_min": 88.0, "optimal_max": 92.0, "lab_min": 80.0, "lab_max": 98.0,
        "clinical_insight": "Tamanho da hemácia. < 88 tende a deficiência de ferro. > 92 tende a deficiência de B12/Folato (Metilação) ou hipotireoidismo.",
        "source_ref": KATIA, "aliases": ["VCM", "MCV"],
    },
    {
        "slug": "rdw", "name": "RDW", "category": "Hematológico", "unit": "%",
        "optimal_max": 12.0, "lab_max": 14.0,
        "clinical_insight": "Variação do tamanho das células. Marcador de \"controle de qualidade\" da medula. Valores altos (>13%) indicam deficiência nutricional e inflamação.",
        "source_ref": KATIA, "aliases": [],
    },
    {
        "slug": "magnesio", "name": "Magnésio", "category": "Mineral", "unit": "mg/dL",
        "optimal_min": 2.2, "lab_min": 1.6,
        "clinical_insight": "Essencial para 300+ enzimas. No sangue é pouco representativo (melhor no eritrócito), mas se estiver baixo no sangue, a deficiência tecidual é grave.",
        "source_ref": KATIA, "aliases": ["Magnésio Sérico"],
    },
    {
        "slug": "zinco", "name": "Zinco Sérico", "category": "Mineral", "unit": "ug/dL",
        "optimal_min": 90.0, "optimal_max": 120.0,
        "clinical_insight": "Vital para testosterona, imunidade e conversão da tireoide. Baixo zinco = baixa testosterona e T3.",
        "source_ref": KATIA, "aliases": ["Zinco"],
    },
    {
        "slug": "acido_folico", "name": "Ácido Fólico (Folato)", "category": "Vitamina", "unit": "ng/mL",
        "optimal_min": 10.0, "lab_min": 3.0,
        "clinical_insight": "Essencial para metilação e redução da homocisteína. Deficiência causa danos ao DNA.",
        "source_ref": FUNCIONAL, "aliases": ["Folato"],
    },
]

METRICS = [
    {
        "slug": "ratio_tg_hdl", "name": "Relação Triglicerídeos / HDL",
        "formula": "{triglicerideos} / {hdl}", "target_max": 2.0,
        "risk_insight": "Principal preditor de risco cardíaco (LDL pequeno e denso). Ideal < 2.0 (ou < 1.0 para excelência).",
        "source_ref": KATIA,
    },
    {
        "slug": "ratio_t3l_t3r", "name": "Eficiência Tireoidiana (T3L/T3R)",
        "formula": "{t3_livre} / {t3_reverso}", "target_min": 20.0,
        "risk_insight": "Se baixo, indica que o corpo está convertendo hormônio ativo em inativo (hibernação).",
        "source_ref": KATIA,
    },
    {
        # Read straight from the lab report; the formula is descriptive and never computed
        "slug": "tfg_estimada", "name": "Taxa de Filtração Glomerular (Estimada)",
        "formula": "Variável (CKD-EPI)", "target_min": 90.0,
        "risk_insight": "Abaixo de 90 indica perda de função renal leve. Abaixo de 60 é insuficiência renal moderada. Monitorar hidratação e creatinina.",
        "source_ref": "Nefrologia Funcional",
    },
]

PROTOCOLS = [
    {
        "trigger_condition": "insulina > 8 OR triglicerideos > 100", "type": "Dieta",
        "title": "Protocolo Jantar Limpo",
        "description": "Eliminar carboidratos (arroz, macarrão, pão) após as 18h. Jantar apenas \"Prato de Mato\" (verduras) + Proteína.",
        "source_ref": KATIA,
    },
    {
        "trigger_condition": "ferritina < 70", "type": "Suplementação",
        "title": "Recuperação de Ferro",
        "description": "Investigar fluxo menstrual intenso (cortar lácteos/glúten). Suplementar Ferro Quelado + Vitamina C. Em casos graves, avaliar ferro endovenoso.",
        "source_ref": KATIA,
    },
    {
        "trigger_condition": "homocisteina > 7", "type": "Suplementação",
        "title": "Protocolo de Metilação",
        "description": "Uso de Metilcobalamina (B12), Metilfolato (B9) e B6 (P5P). Evitar vitaminas sintéticas não metiladas.",
        "source_ref": KATIA,
    },
    {
        "trigger_condition": "creatinina > 1.0", "type": "Hábito",
        "title": "Hidratação Programada",
        "description": "Beber 1 copo de água (300ml) por hora, das 8h às 19h. Não beber tudo de uma vez.",
        "source_ref": KATIA,
    },
    {
        "trigger_condition": "t3_livre < 2.3 OR t3_reverso > 0.25", "type": "Suplementação",
        "title": "Kit Conversão Tireoide",
        "description": "Suplementar Zinco, Selênio e Magnésio para ativar a enzima deiodinase.",
        "source_ref": KATIA,
    },
    {
        "trigger_condition": "gama_gt > 16 OR tgo > 20", "type": "Estilo de Vida",
        "title": "Detox Hepático",
        "description": "Zero álcool e açúcar. Evitar analgésicos desnecessários. Aumentar ingestão de crucíferos e água.",
        "source_ref": KATIA,
    },
    {
        "trigger_condition": "ferritina < 70 OR hemoglobina < 13", "type": "Treino",
        "title": "Construção de Base Aeróbia",
        "description": "Focar em cardio de Zona 2 (baixa intensidade, longa duração) para aumentar densidade mitocondrial e capacidade de transporte de oxigênio.",
        "source_ref": FRECCIA,
    },
    {
        "trigger_condition": "creatinina > 1.2", "type": "Treino",
        "title": "Treino de Potência para Preservação Muscular",
        "description": "Realizar movimentos com intenção de velocidade (mesmo com carga leve) para recrutar fibras tipo 2 e evitar perda muscular.",
        "source_ref": FRECCIA,
    },
    {
        "trigger_condition": "vitamina_d3 < 50", "type": "Suplementação",
        "title": "Otimização de Vitamina D",
        "description": "Suplementar D3 com TCM (gordura) pela manhã. Associar K2 e Magnésio para direcionar o cálcio.",
        "source_ref": KATIA,
    },
]

_BIOMARKER_FIELDS = (
    "name", "category", "unit", "optimal_min", "optimal_max", "lab_min", "lab_max",
    "clinical_insight", "metaphor", "source_ref",
)
_METRIC_FIELDS = ("name", "formula", "target_min", "target_max", "risk_insight", "source_ref")
_PROTOCOL_FIELDS = ("trigger_condition", "type", "title", "description", "dosage", "source_ref")


def protocol_id(title: str) -> str:
    """Stable id so reseeding never duplicates a protocol."""
    return str(uuid5(NAMESPACE_URL, f"logical-brain/protocol/{title}"))


def seed_catalog_into(db: Session) -> None:
    """Upsert every seeded row; protocols missing from the seed list are removed."""
    existing = {row.slug: row for row in db.query(BiomarkerReference).all()}
    for position, item in enumerate(BIOMARKERS):
        row = existing.get(item["slug"]) or BiomarkerReference(slug=item["slug"])
        for field in _BIOMARKER_FIELDS:
            setattr(row, field, item.get(field))
        row.common_aliases = json.dumps(item.get("aliases", []), ensure_ascii=False)
        row.position = position
        db.add(row)

    existing_metrics = {row.slug: row for row in db.query(CalculatedMetric).all()}
    for position, item in enumerate(METRICS):
        row = existing_metrics.get(item["slug"]) or CalculatedMetric(slug=item["slug"])
        for field in _METRIC_FIELDS:
            setattr(row, field, item.get(field))
        row.position = position
        db.add(row)

    existing_protocols = {row.id: row for row in db.query(ProtocolRecord).all()}
    seeded_ids = set()
    for position, item in enumerate(PROTOCOLS):
        row_id = protocol_id(item["title"])
        seeded_ids.add(row_id)
        row = existing_protocols.get(row_id) or ProtocolRecord(id=row_id)
        for field in _PROTOCOL_FIELDS:
            setattr(row, field, item.get(field))
        row.position = position
        db.add(row)
    for row_id, row in existing_protocols.items():
        if row_id not in seeded_ids:
            db.delete(row)
    db.commit()
    logger.info(
        "Seeded reference catalog: %s biomarkers, %s metrics, %s protocols",
        len(BIOMARKERS),
        len(METRICS),
        len(PROTOCOLS),
    )


def seed_catalog():
    db = SessionLocal()
    try:
        seed_catalog_into(db)
    finally:
        db.close()
