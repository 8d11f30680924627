"""Prompt templates for notice analysis."""

# Source text limits per task, in characters
CHUNK_PREVIEW_CHARS = 1000
CARGO_CONTENT_CHARS = 4000
CURRICULUM_CONTENT_CHARS = 6000
CHUNK_GENERATION_CHARS = 8000
DIGEST_SUMMARY_CHARS = 100


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


BATCH_SUMMARY_SYSTEM = """Você é um especialista em análise de documentos oficiais e editais.
Sua tarefa é criar sumários concisos e informativos."""

BATCH_SECTION = """=== SEÇÃO {index}: {title} ===
{content}"""

BATCH_SUMMARY_PROMPT = """Analise as seguintes seções de um edital e crie um sumário estruturado para cada uma:

{sections}

Para cada seção, forneça:
1. Um resumo conciso (máximo 150 palavras)
2. Pontos-chave principais (3-5 itens)
3. Nível de importância (high/medium/low)

Responda APENAS com JSON válido neste formato, com uma entrada por seção e na mesma ordem:
{{
  "summaries": [
    {{
      "section": 1,
      "title": "título da seção",
      "summary": "resumo conciso da seção",
      "keyPoints": ["ponto 1", "ponto 2", "ponto 3"],
      "importance": "high|medium|low"
    }}
  ]
}}"""

CARGO_ANALYSIS_SYSTEM = """Você é um especialista em análise de editais de concursos públicos.
Sua tarefa é identificar quantos cargos estão sendo oferecidos em um edital e extrair seus nomes de forma precisa."""

CARGO_ANALYSIS_PROMPT = """TAREFA: Analise o seguinte edital e determine quantos cargos estão sendo oferecidos.

INFORMAÇÕES DO ARQUIVO:
- Nome: {file_name}
- Concurso: {exam_name}

CONTEÚDO DO EDITAL:
{content}

INSTRUÇÕES:
1. Identifique todos os cargos oferecidos no edital
2. Determine se há apenas UM cargo ou MÚLTIPLOS cargos
3. Se for apenas um cargo, extraia o nome exato
4. Se forem múltiplos, liste todos os cargos

FORMATO DE RESPOSTA (JSON):
{{
  "hasSingleCargo": true,
  "cargoName": "Nome exato do cargo (apenas se for único)",
  "cargos": ["lista", "de", "cargos"],
  "totalCargos": 1,
  "explicacao": "Breve explicação da análise"
}}

Use "cargoName" somente quando houver um único cargo e "cargos" somente quando houver vários."""

CURRICULUM_SYSTEM = """Você é um especialista em extração de conteúdo programático de editais de concursos públicos.
Sua tarefa é identificar e estruturar as disciplinas e tópicos de estudo de forma hierárquica e organizada."""

CURRICULUM_PROMPT = """TAREFA: Extraia o conteúdo programático para o cargo "{cargo_name}" do seguinte edital.

INFORMAÇÕES:
- Cargo: {cargo_name}
- Concurso: {exam_name}

CONTEÚDO DO EDITAL:
{content}

INSTRUÇÕES:
1. Encontre a seção de conteúdo programático/disciplinas para o cargo específico
2. Organize as disciplinas e seus respectivos tópicos
3. Mantenha a estrutura hierárquica original
4. Seja preciso e completo na extração

FORMATO DE RESPOSTA (JSON):
{{
  "cargo": "{cargo_name}",
  "disciplinas": [
    {{
      "nome": "Nome da disciplina",
      "topicos": ["Tópico 1", "Tópico 2", "Subtópico com detalhes"]
    }}
  ]
}}"""

OVERALL_SUMMARY_SYSTEM = """Você é um especialista em resumir documentos oficiais de forma clara e objetiva."""

OVERALL_SUMMARY_PROMPT = """Com base nestas seções principais de um edital, crie um sumário geral conciso:

DOCUMENTO: {document_name}

SEÇÕES PRINCIPAIS:
{digest}

Crie um resumo executivo em português (máximo 200 palavras) que destaque:
1. Propósito do edital
2. Principais seções/tópicos abordados
3. Aspectos mais relevantes

Responda apenas com o texto do resumo, sem formatação adicional."""

CHUNK_GENERATION_SYSTEM = """Você é um especialista em processamento de documentos para concursos públicos.
Sua tarefa é analisar conteúdo de editais e gerar chunks inteligentes que capturem informações importantes de forma estruturada."""

CHUNK_GENERATION_PROMPT = """TAREFA: Analise o seguinte conteúdo de edital de concurso público e gere chunks inteligentes que capturem informações importantes.

INFORMAÇÕES DO ARQUIVO:
- Nome: {file_name}
- Tipo: {file_type}
- Concurso: {exam_name}

CONTEÚDO:
{content}

INSTRUÇÕES:
1. Analise o conteúdo e identifique seções importantes (cargos, requisitos, conteúdo programático, cronograma, etc.)
2. Crie chunks semânticos que mantêm contexto completo
3. Cada chunk deve ter entre 200-800 caracteres
4. Gere no máximo {max_chunks} chunks
5. Priorize informações sobre cargos, requisitos e conteúdo programático
6. Para cada chunk, forneça título, resumo e palavras-chave

FORMATO DE RESPOSTA (JSON):
{{
  "chunks": [
    {{
      "id": "chunk_001",
      "content": "Conteúdo do chunk...",
      "title": "Título descritivo",
      "summary": "Resumo do que contém",
      "keywords": ["palavra1", "palavra2", "palavra3"],
      "chunkIndex": 0
    }}
  ],
  "totalChunks": 1
}}"""
