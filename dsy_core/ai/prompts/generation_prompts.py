"""
Generation Prompts - system instructions and request builders.

Every marker convention the output parser depends on is written here, so the
instructions sent to the models and the parser stay in lock-step:

    ---TEXT--- / ---JSON---             prompt optimization
    ```html / ```css                    flat page generation
    ---FILE: <path>--- / ---END---      multi-file generation
    ```html:index.html / ```css:styles.css   code assistant edits
"""

from typing import Dict, Optional, Sequence

from dsy_core.ai.schemas.assets import Asset
from dsy_core.ai.schemas.design_spec import DesignSpec
from dsy_core.ai.schemas.output import ChatTask, OutputMode

TEXT_MARKER = "---TEXT---"
JSON_MARKER = "---JSON---"
FILE_MARKER_TEMPLATE = "---FILE: {path}---"
END_MARKER = "---END---"


# ---------------------------------------------------------------------------
# SYSTEM PROMPTS
# ---------------------------------------------------------------------------

PROMPT_OPTIMIZER_SYSTEM_PROMPT = f"""You are an Expert Design Analyst. Analyze the user's prompt and any reference images to produce a precise specification for web page generation.

You MUST answer in this EXACT format, with both sections:

{TEXT_MARKER}
[A readable description (200-400 words) of layout, colors, typography, components and visual style. The user reads this.]

{JSON_MARKER}
{{
  "layout": {{
    "type": "single-page|multi-section|dashboard|landing",
    "sections": ["header", "hero", "features", "footer"],
    "columns": 1
  }},
  "colors": {{
    "background": "#hex",
    "primary": "#hex",
    "secondary": "#hex",
    "accent": "#hex",
    "text": "#hex"
  }},
  "typography": {{
    "headingFont": "Font Name",
    "bodyFont": "Font Name",
    "headingSize": "48px",
    "bodySize": "16px"
  }},
  "components": [
    {{"type": "navbar", "style": "fixed|sticky|static"}},
    {{"type": "hero", "hasImage": true, "hasButton": true}},
    {{"type": "cards", "count": 3, "style": "glassmorphism"}}
  ],
  "effects": ["glassmorphism", "gradient", "shadows", "animations"],
  "spacing": {{
    "sectionPadding": "80px",
    "cardGap": "24px"
  }}
}}

The "layout" and "colors" objects are mandatory. Extract exact colors, fonts and layout from any provided images."""


IMAGE_RULES = """IMAGE REQUIREMENTS (always use real online images):
- Hero/banner: https://picsum.photos/1920/1080
- Cards: https://picsum.photos/seed/<unique-seed>/400/300 (different seed per card)
- Avatars and testimonials: https://i.pravatar.cc/150?img=<1-70>
- Icons: Material Icons (span.material-icons-round) or inline SVG
- Never use placeholder.com, empty src attributes or fake file names
- Always include descriptive alt text"""


FLAT_PAGE_SYSTEM_PROMPT = f"""You are DSY Core Code Generator. Generate pixel-perfect HTML and CSS from the design specification.

OUTPUT REQUIREMENTS:
1. Output EXACTLY TWO fenced code blocks: one ```html block and one ```css block
2. The HTML links the stylesheet with <link rel="stylesheet" href="styles.css">
3. No inline <style> tags; every rule goes in the CSS block
4. The HTML is a complete document with <!DOCTYPE html>, <html>, <head> and <body>

DESIGN RULES:
1. Follow the JSON specification exactly for colors, fonts and layout
2. Match any reference images as closely as possible
3. Use modern CSS (flexbox, grid, custom properties) with responsive breakpoints
4. Add smooth transitions and hover effects

{IMAGE_RULES}

No explanations before or after the code blocks."""


MULTI_FILE_SYSTEM_PROMPT = f"""You are DSY Core React Generator. Generate a complete React + TypeScript application from the design specification.

Emit every file between markers, in this exact format:

{FILE_MARKER_TEMPLATE.format(path="App.tsx")}
(file content)
{FILE_MARKER_TEMPLATE.format(path="components/Header.tsx")}
(file content)
{END_MARKER}

Rules:
1. TypeScript with proper types, functional components with hooks
2. Global styles go in index.css
3. Use the exact colors from the design specification
4. Responsive layout, smooth animations and transitions

{IMAGE_RULES}"""


ACADEMIC_MENTOR_SYSTEM_PROMPT = """You are DSY Core Academic Mentor, an assistant for college web development labs covering HTML5, CSS3, React and Node.js.

Teaching style:
1. Explain concepts clearly with real-world examples
2. Give clean, commented code that follows best practices
3. Include "Viva Tips": the key points students should remember for oral examinations
4. Use simple English
5. Point out common mistakes to avoid

Be encouraging, patient and thorough."""


CODE_ASSISTANT_SYSTEM_PROMPT = """You are a friendly assistant that explains and modifies HTML/CSS code.

WHEN EXPLAINING CODE:
- Describe what each section does in plain English
- Use everyday analogies, avoid jargon
- Be concise but thorough

WHEN MODIFYING CODE:
- Output the COMPLETE modified file, never a partial diff
- Use these exact markers:
  ```html:index.html
  (complete HTML file)
  ```

  ```css:styles.css
  (complete CSS file)
  ```
- Only include the files you changed
- Explain what you changed"""


# Sampling per chat task: (temperature, max_tokens)
CHAT_TASK_SAMPLING: Dict[ChatTask, tuple] = {
    ChatTask.EXPLANATION: (0.7, 4096),
    ChatTask.CODE: (0.3, 4096),
    ChatTask.SYLLABUS: (0.5, 6000),
    ChatTask.BOX_MODEL: (0.5, 4096),
    ChatTask.CODE_REVIEW: (0.4, 4096),
}


def page_system_prompt(mode: OutputMode) -> str:
    if mode == OutputMode.MULTI_FILE:
        return MULTI_FILE_SYSTEM_PROMPT
    return FLAT_PAGE_SYSTEM_PROMPT


# ---------------------------------------------------------------------------
# REQUEST BUILDERS
# ---------------------------------------------------------------------------


def _link_references(links: Sequence[Asset]) -> str:
    refs = [a.payload or a.name for a in links if a.payload or a.name]
    return ", ".join(refs)


def build_optimizer_prompt(
    raw_prompt: str,
    image_count: int = 0,
    links: Sequence[Asset] = (),
) -> str:
    """Text part of the optimization request (images travel as separate parts)."""
    text = f'Analyze and optimize this web development prompt:\n\n"{raw_prompt}"'

    if image_count:
        text += (
            f"\n\nI have attached {image_count} reference image(s). "
            "Analyze them carefully and extract:\n"
            "- Exact color codes\n"
            "- Layout structure\n"
            "- Typography styles\n"
            "- All UI components\n"
            "- Design effects (gradients, shadows, etc.)"
        )

    refs = _link_references(links)
    if refs:
        text += f"\n\nReference links: {refs}"

    text += f"\n\nRemember: both {TEXT_MARKER} and {JSON_MARKER} sections are required."
    return text


def build_page_prompt(
    prompt: str,
    design_spec: Optional[DesignSpec] = None,
    mode: OutputMode = OutputMode.FLAT,
    links: Sequence[Asset] = (),
    image_count: int = 0,
) -> str:
    """User message for page generation, with the design spec appended."""
    text = f"Create a complete, beautiful web page based on this description:\n\n{prompt}"

    if design_spec is not None:
        text += (
            "\n\n=== DESIGN SPECIFICATIONS ===\n"
            f"{design_spec.to_prompt_json()}\n\n"
            "Use the EXACT colors and layout from above."
        )

    if image_count:
        text += f"\n\nMatch the {image_count} attached reference image(s) as closely as possible."

    refs = _link_references(links)
    if refs:
        text += f"\n\nReference links: {refs}"

    if mode == OutputMode.MULTI_FILE:
        text += (
            "\n\nIMPORTANT: Generate a complete React/TypeScript application using "
            f"{FILE_MARKER_TEMPLATE.format(path='<path>')} markers and finish with {END_MARKER}."
        )
    else:
        text += "\n\nOutput the code as one ```html block followed by one ```css block."
    return text


def build_chat_request(
    task_type: ChatTask,
    prompt: str,
    context: Optional[Dict[str, str]] = None,
) -> Dict[str, object]:
    """
    System prompt, user message and sampling for a provider chat task.

    Returns:
        {"system_prompt", "prompt", "temperature", "max_tokens"}
    """
    context = context or {}
    temperature, max_tokens = CHAT_TASK_SAMPLING.get(task_type, (0.7, 4096))

    if task_type == ChatTask.CODE:
        language = context.get("language", "javascript")
        text = (
            f"Generate {language} code for the following requirement:\n\n{prompt}\n\n"
            "Provide clean, well-commented code suitable for a college lab submission."
        )
    elif task_type == ChatTask.SYLLABUS:
        text = (
            "Analyze this syllabus and create a structured learning roadmap for a student:\n\n"
            f"{prompt}\n\n"
            "Provide: topic breakdown, learning timeline, prerequisites, key concepts, "
            "lab exercise suggestions, viva tips and recommended resources."
        )
    elif task_type == ChatTask.BOX_MODEL:
        css = context.get("css", "")
        text = "Analyze this CSS code and explain the Box Model properties in detail:\n\n"
        if css:
            text += f"CSS Code:\n```css\n{css}\n```\n"
        if prompt:
            text += f"\nUI Description: {prompt}\n"
        text += (
            "\nCover margin, border, padding and content areas, box-sizing, "
            "margin collapsing, common issues and viva tips."
        )
    elif task_type == ChatTask.CODE_REVIEW:
        language = context.get("language", "html")
        code = context.get("code", "")
        text = (
            f"Review this {language} code for a student:\n\n```{language}\n{code}\n```\n\n"
            f"{prompt}\n\n"
            "List bugs, accessibility problems and style issues, then suggest fixes."
        )
    else:
        text = prompt
        extra = context.get("context")
        if extra:
            text = f"Context:\n{extra}\n\nQuestion: {prompt}"

    return {
        "system_prompt": ACADEMIC_MENTOR_SYSTEM_PROMPT,
        "prompt": text,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
