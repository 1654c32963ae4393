"""Prompt templates for every model call in the research pipeline.

Templates are formatted with ``str.format``; literal JSON braces are doubled.
"""

QUERY_DECOMPOSITION_PROMPT = """\
You are a research planning assistant. Break down the user's question into \
specific sub-questions that can be individually researched.

RULES:
1. Generate 5-8 distinct sub-questions
2. Each sub-question should be independently searchable
3. Cover different aspects: facts, pricing, comparisons, features, opinions
4. Prioritize sub-questions by importance to answering the main question
5. Generate an optimized search query for each sub-question
6. DO NOT include years in search queries

OUTPUT FORMAT (STRICT JSON ONLY - NO MARKDOWN, NO EXPLANATIONS):
You MUST respond with ONLY valid JSON. Do not include markdown code blocks, \
explanations, or any other text.

{{
  "subQuestions": [
    {{
      "id": "q1",
      "question": "What is the specific sub-question?",
      "category": "pricing|features|comparison|facts|opinions|news",
      "priority": "high|medium|low",
      "searchQuery": "optimized search query without years"
    }}
  ]
}}

EXAMPLE:

User: "Should my startup use OpenAI or Anthropic?"

Output:
{{
  "subQuestions": [
    {{"id": "q1", "question": "What are OpenAI's API pricing tiers?", \
"category": "pricing", "priority": "high", "searchQuery": "openai api pricing per token"}},
    {{"id": "q2", "question": "What are Anthropic's API pricing tiers?", \
"category": "pricing", "priority": "high", "searchQuery": "anthropic claude api pricing"}},
    {{"id": "q3", "question": "What are the rate limits for each provider?", \
"category": "features", "priority": "medium", \
"searchQuery": "openai anthropic api rate limits comparison"}},
    {{"id": "q4", "question": "What do startups say about using each provider?", \
"category": "opinions", "priority": "medium", \
"searchQuery": "startup experience openai vs anthropic"}},
    {{"id": "q5", "question": "What are the context window limits?", \
"category": "features", "priority": "high", "searchQuery": "gpt claude context window tokens"}}
  ]
}}

User question: {question}

Generate the sub-questions JSON:"""


FACT_EXTRACTION_PROMPT = """\
Extract factual information from this article.

IMPORTANT RULES:
- Extract ONLY facts from the article content
- DO NOT extract CSS styling information (colors, fonts, sizes, etc.)
- DO NOT extract JavaScript code or configuration
- DO NOT extract website UI elements (buttons, menus, themes)
- Focus on: statistics, dates, names, features, prices, comparisons
- Each fact should be a complete, meaningful statement
- Maximum {max_facts} facts

URL: {url}
DOMAIN: {domain}

ARTICLE CONTENT:
{content}

Respond with ONLY valid JSON (no markdown):
{{"facts":[{{"claim":"statement of fact","value":"specific value if applicable",\
"context":"sentence where fact appears","confidence":80,\
"category":"pricing|feature|statistic|date|fact"}}]}}"""


GAP_ANALYSIS_PROMPT = """\
You are a research gap analyzer. Given the original question and the facts \
gathered so far, identify what information is still missing or uncertain.

RULES:
1. Compare gathered facts against what's needed to fully answer the question
2. Identify conflicting information that needs resolution
3. Note if critical information is missing
4. Suggest specific search queries to fill each gap
5. Rate importance of each gap

OUTPUT FORMAT (STRICT JSON ONLY - NO MARKDOWN, NO EXPLANATIONS):
You MUST respond with ONLY valid JSON. Ensure all strings are properly \
escaped and all brackets/braces are closed.

{{
  "gaps": [
    {{
      "subQuestionId": "q1 or 'new'",
      "description": "What information is missing",
      "suggestedQuery": "search query to fill this gap",
      "importance": "critical|important|nice-to-have"
    }}
  ],
  "conflicts": [
    {{
      "topic": "What the conflict is about",
      "positions": ["Position A", "Position B"],
      "suggestedQuery": "query to resolve conflict"
    }}
  ]
}}

ORIGINAL QUESTION: {question}

SUB-QUESTIONS RESEARCHED:
{sub_questions}

FACTS GATHERED:
{facts}

Analyze gaps and conflicts as JSON:"""


SYNTHESIS_PROMPT = """\
You are a precision research assistant. Your goal is to provide a structured, \
fact-based answer cited from the provided sources.

STRUCTURE:
1. **Direct Answer**: A concise 2-3 sentence summary answering the main question.
2. **Key Findings**: A bulleted list of the 3-5 most critical facts or stats.
3. **Detailed Analysis**: Use H2 headers (##) to break down the answer into \
logical sections based on the sub-questions.
4. **Conclusion**: A brief wrap-up.

RULES:
- CITATIONS: You MUST cite your sources using [1], [2] format at the end of sentences.
- ACCURACY: Use ONLY the provided verified facts. Do not invent facts.
- TONE: Professional, objective, and concise. No fluff.
- FORMAT: Use Markdown (bold for emphasis, ## for section headers, - for bullets).

VERIFIED FACTS:
{facts}

UNFILLED GAPS:
{gaps}

SOURCE LIST:
{sources}

ORIGINAL QUESTION: {question}

Write a comprehensive response with citations:"""


FOLLOW_UP_PROMPT = """\
Based on this research about "{question}", suggest 3-4 relevant follow-up \
questions the user might want to ask next.

Research Context:
{context}...

Return ONLY a JSON array of strings. Example: ["Question 1?", "Question 2?"]"""
