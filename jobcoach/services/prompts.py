"""
Resume Prompts and Templates.

Prompts sent to the generative-language model for resume parsing and
section improvement.
"""

RESUME_PARSER_SYSTEM_PROMPT = "You are a resume parsing assistant."

RESUME_PARSING_PROMPT = """Analyze the resume text and return structured JSON with sections.
Use this exact format: {{"sections":[{{"title":"Title","content":"Content"}}],"profile":{{"name":"","email":"","phone":"","location":"","title":"","links":{{"linkedin":"","github":"","website":""}}}}}}.
Use title case for section titles.
Preserve bullet points as newline separated lines.
Include sections only if content is available.
Fill the profile from the resume header; leave unknown fields empty.
Resume text:
\"\"\"{resume_text}\"\"\""""

SECTION_IMPROVER_SYSTEM_PROMPT = (
    "You are an expert resume writer. You rewrite resume sections to be "
    "concise, quantified and achievement-focused without inventing facts."
)

SECTION_IMPROVEMENT_PROMPT = """Improve the following resume section.

Section title: {title}
{job_context}
Rules:
- Keep every fact from the original; do not invent employers, dates or numbers.
- Start bullet points with strong action verbs and keep one bullet per line.
- Keep the result under {max_chars} characters.
- Return only the improved section text, with no headings, commentary or markdown fences.

Original section:
\"\"\"{content}\"\"\""""

JOB_CONTEXT_TEMPLATE = """Target role: {job_title}
Job description:
\"\"\"{job_description}\"\"\"
Emphasise the experience most relevant to this role.
"""
