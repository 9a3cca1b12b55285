RESUME_PROMPT = """Extract information from this resume and return it in JSON format. Focus on finding:
- Full name (usually at the top)
- Email address (look for @ symbol)
- Phone number (any standard format with numbers)
- List of technical skills (especially programming languages, frameworks, tools)
- Years of experience (look for numbers followed by "years" or similar patterns)
- Education details (highest degree and institution)

Return ONLY a valid JSON object like this example, no other text:
{{
  "name": "John Smith",
  "email": "john@example.com",
  "phone": "+1-234-567-8900",
  "skills": ["AWS", "Python", "Java"],
  "experience": "5",
  "education": "BS Computer Science, XYZ University"
}}

Parse this resume text:
{doc}
"""

JD_PROMPT = """Extract information from this job description and return it in JSON format. Focus on finding:
- Job title (position name)
- Required technical skills. Be thorough and extract ALL technical skills including:
  * Programming languages (e.g., Python, Java, JavaScript, C++)
  * Frameworks and libraries (e.g., React, Node.js, Django, Spring)
  * Cloud platforms (e.g., AWS, Azure, GCP)
  * Databases (e.g., MySQL, PostgreSQL, MongoDB)
  * Tools and technologies (e.g., Docker, Kubernetes, Git)
  * Data science tools (e.g., TensorFlow, PyTorch, Pandas)
  * Project management methodologies (e.g., Agile, Scrum, Kanban, SAFe)
  * Business intelligence tools (e.g., PowerBI, Tableau, Looker)
  * ETL tools and processes
  * Any other technical tools or platforms mentioned
- Required years of experience
- Key responsibilities

Return ONLY a valid JSON object like this example, no other text:
{{
  "title": "Senior Software Engineer",
  "skills": ["Python", "Django", "AWS", "Docker", "PostgreSQL", "Git", "Agile"],
  "experience": "5",
  "responsibilities": ["Lead development team", "Design system architecture"]
}}

Parse this job description:
{doc}
"""
