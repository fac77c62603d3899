EMPLOYMENT_HISTORY_PROMPT = """
                You are a data extraction engine. Analyze the resume and extract employment history.
                Return ONLY a JSON array of objects.
                Required JSON Structure:
                ${EmploymentFormat}
                - If end date is "Present", use "Present".
                - DO NOT output markdown code blocks.
                - Output strictly valid JSON.
                """

employment_structure = """
                [
                  { "company": "String", "jobTitle": "String", "startDate": "String", "endDate": "String", "city": "String", "description": "String (summary of duties)" }
                ]
                """

EDUCATION_PROMPT = """
                Analyze the provided resume document and extract the Education, Degrees, Diplomas, and Certifications.
                Return the data as a valid JSON array of objects.
                Keys: "name", "institute", "location", "year".
                IMPORTANT: Your response MUST be only the raw JSON array.
                """

SKILLS_PROMPT = """
                Generate 6 to 10 relevant skill attributes for a "${jobTitle}".
                Return as JSON array of strings.
                """

VALIDATION_PROMPT = """
                Evaluate skill: "${skillName}" (Rating: ${rating}).
                Proof: "${proof}". Certs: ${certifications}.
                Respond with ONLY: "Strongly Supported", "Supported", or "Not Supported".
                """

SUMMARY_PROMPT = """Write a 100-150 word professional summary based on:

${allProofPoints}"""
