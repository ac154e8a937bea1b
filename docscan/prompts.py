"""
Prompts sent to the vision model, one per document kind.
Each prompt asks for JSON only; parsing still tolerates fenced or wrapped output.
"""

from docscan.schema import PromptKind

CURRICULUM_PROMPT = """
You are a document scanner for Bicol University BSCS curriculum.

Extract ALL subject codes visible in this document. Focus on ACCURACY and COMPLETENESS.

INSTRUCTIONS:
1. Extract EVERY subject code across all years (expect 25-30 subjects per image)
2. Scan ALL sections systematically
3. Each year has TWO columns: First Semester (left), Second Semester (right)
4. Third year may have a SUMMER section (separate) with CS 122
5. Skip only the "Total" row at the bottom of each semester

SUBJECT CODE PATTERNS:
- CS courses: CS 101-126
- Math: Math 101, Math 102, Math Elec 101, Math Elec 102
- GEC: GEC 11-20, GEC Elec 1, GEC Elec 2, GEC Elec 21, GEC Elec 22
- CS Electives: CS Elec 1-3
- Other: Phys 1, PATHFIT 1-4, NSTP 11, NSTP 2

IMPORTANT:
- Extract the code EXACTLY as shown (preserve spacing)
- Detect year and semester from document layout
- If you see a separate "SUMMER" section, mark CS 122 as semester: "Summer"

Return ONLY valid JSON:
{
  "subjects": [
    {"subjectCode": "CS 101", "subjectName": "", "lecUnits": 0, "labUnits": 0, "units": 0, "yearLevel": "1st Year", "semester": "1st Semester"}
  ],
  "documentType": "curriculum_checklist",
  "totalSubjectsFound": 29,
  "confidence": "high"
}"""

COR_PROMPT = """
You are a document scanner for a Philippine university (Bicol University).
You are looking at a Certificate of Registration (COR) document.

A COR typically contains:
- Student name, student number, program/course
- The current semester and academic year
- A SCHEDULE table with columns: Code, Subject, Units, Class, Days, Time, Room, Faculty

Extract the student's PROGRAM and ALL enrolled subjects/courses from this COR.

For each subject/course, extract these fields:
- subjectCode: The course code (e.g., "CS 125", "GEC 19", "GEC Elect 21.3")
- subjectName: The full course title/description
- units: Total credit units (number)
- schedules: An array of schedule objects, each with:
  - days: Single day code (e.g., "M", "T", "W", "Th", "F")
  - time: The time value (e.g., "01:00 PM - 04:00 PM")
  - room: The room value (e.g., "L1", "CSD 25", "CSD 24")
- section: The class/section name (e.g., "BSCS-P-4A")
- instructor: Faculty/professor name (e.g., "ARISPE, M.", "ALMONTE, R.")

IMPORTANT RULES:
1. Extract EVERY subject listed in the schedule table, do not skip any
2. The table has separate columns for Days, Time, and Room — extract each SEPARATELY
3. Room values are typically short codes like "L1", "CSD 25", "CSD 24", "GYM", etc.
4. The program is near the top (e.g., "Bachelor of Science in Computer Science")
5. If a field is not visible or unclear, set it to ""
6. Units column may show "3.0 3.0 0.0" meaning total=3, lec=3, lab=0 — just use the first number
7. Return ONLY valid JSON — no markdown, no backticks, no explanation

MULTI-DAY SCHEDULES:
Some subjects meet on multiple days (e.g., "MW" = Monday & Wednesday, "TTh" = Tuesday & Thursday).
When a subject has multi-day schedule, return MULTIPLE entries in the "schedules" array — one per day.
- "MW" → two entries: one for "M" and one for "W" (same time, same room)
- "TTh" → two entries: one for "T" and one for "Th"
- "MWF" → three entries: "M", "W", "F"
- Single day like "W", "F", "Th" → one entry

Return this exact format:
{
  "program": "BS Computer Science",
  "courses": [
    {
      "subjectCode": "CS 125",
      "subjectName": "CS Thesis 2",
      "units": 3,
      "schedules": [
        { "days": "W", "time": "01:00 PM - 04:00 PM", "room": "L1" }
      ],
      "section": "BSCS-P-4A",
      "instructor": "ARISPE, M."
    },
    {
      "subjectCode": "MATH 101",
      "subjectName": "Mathematics in the Modern World",
      "units": 3,
      "schedules": [
        { "days": "T", "time": "09:00 AM - 10:30 AM", "room": "CSD 25" },
        { "days": "Th", "time": "09:00 AM - 10:30 AM", "room": "CSD 25" }
      ],
      "section": "BSCS-P-4A",
      "instructor": "SANTOS, J."
    }
  ],
  "totalCoursesFound": 5,
  "confidence": "high"
}"""

TIMETABLE_PROMPT = """
You are a document scanner for a Philippine university (Bicol University).
You are looking at a student TIMETABLE / CLASS SCHEDULE document from the BU Student Portal.

The timetable is a weekly grid showing:
- Days of the week as columns (Monday through Sunday)
- Time slots as rows (30-minute increments)
- Colored blocks representing classes with subject name, section, room, and instructor

The document header contains:
- Student name
- Academic Year and Semester (e.g., "AY 2021-2022 1st Semester")

Extract the ACADEMIC YEAR, SEMESTER, and ALL subjects/classes from this timetable.

For each subject/class, extract:
- subjectName: The full course title (e.g., "Introduction to Computing", "Computer Programming 1")
- section: The section code (e.g., "PC-BSIT1B", "BSCS-P-4A")
- room: The room/venue (e.g., "Gym 51", "CSD 25", "NSTP Rm. 3")
- instructor: Faculty name (e.g., "Jorge Sulpicio S. Aganan", "Andy Nopre")
- schedules: An array of schedule objects for each day/time the class meets:
  - day: Full day name (e.g., "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
  - startTime: Start time (e.g., "9:30 AM", "1:00 PM")
  - endTime: End time (e.g., "11:00 AM", "2:30 PM")

IMPORTANT RULES:
1. Extract EVERY class block visible in the timetable grid
2. A subject may appear on MULTIPLE days — create a separate schedule entry for each day
3. A subject may appear multiple times on the same day at different times — capture each occurrence
4. Read the time from the row positions (the grid is in 30-minute increments starting from 6:00 AM)
5. The section and room are usually shown below the subject name in each block
6. The instructor name is usually shown below the section/room
7. Academic Year format: "AY XXXX-XXXX" (e.g., "AY 2021-2022")
8. Semester: "1st Semester", "2nd Semester", or "Summer"
9. If a subject code is visible, include it. If only the subject name is shown, set subjectCode to ""
10. Return ONLY valid JSON — no markdown, no backticks, no explanation

Return this exact format:
{
  "academicYear": "AY 2021-2022",
  "semester": "1st Semester",
  "subjects": [
    {
      "subjectName": "Introduction to Computing",
      "subjectCode": "",
      "section": "PC-BSIT1B",
      "room": "Gym 51",
      "instructor": "Jorge Sulpicio S. Aganan",
      "schedules": [
        { "day": "Wednesday", "startTime": "10:30 AM", "endTime": "12:00 PM" },
        { "day": "Tuesday", "startTime": "3:00 PM", "endTime": "4:30 PM" }
      ]
    },
    {
      "subjectName": "Computer Programming 1",
      "subjectCode": "",
      "section": "PC-BSIT1B",
      "room": "Gym 51",
      "instructor": "Andy Nopre",
      "schedules": [
        { "day": "Monday", "startTime": "6:00 PM", "endTime": "7:30 PM" },
        { "day": "Friday", "startTime": "4:30 PM", "endTime": "6:00 PM" }
      ]
    }
  ],
  "totalSubjectsFound": 8,
  "confidence": "high"
}"""

GRADES_PROMPT = """
You are a document scanner for a Philippine university (Bicol University).
You are looking at a screenshot or photo of a student's grade report/portal.

Extract ALL subject codes and their corresponding grades from this image.

For each subject, extract:
- subjectCode: The course code (e.g., "CS 125", "GEC 19", "GEC Elect 21.3", "MATH 101")
- subjectName: The full course title/description (e.g., "Design and Analysis of Algorithms")
- grade: The numerical grade value (e.g., 1.0, 1.25, 1.5, 1.75, 2.0, 2.25, 2.5, 2.75, 3.0, 5.0)

IMPORTANT RULES:
1. Extract EVERY subject and grade pair visible in the image
2. Grades in Philippine universities typically range from 1.0 (highest) to 5.0 (failing)
3. Common grade values: 1.0, 1.25, 1.5, 1.75, 2.0, 2.25, 2.5, 2.75, 3.0, 4.0, 5.0
4. INC = Incomplete, DRP = Dropped — skip these, only extract numeric grades
5. Look for table rows with subject codes paired with grade values
6. Subject codes may appear as: "CS 125", "GEC Elect 21.3", "PATHFIT 1", "NSTP 1", etc.
7. CRITICAL: Do NOT confuse the "Units" columns (Total, Lec, Lab) with the actual grade!
   - Units columns typically show values like 3.0, 5.0, 2.0 and appear BEFORE the grade
   - The GRADE column is usually the LAST numeric column, often near a "PASSED/FAILED" status
   - Example row: "GEC 18 | Ethics | 3.0 | 3.0 | 0.0 | 1.8 | PASSED" → grade is 1.8, NOT 3.0
8. Return ONLY valid JSON — no markdown, no backticks, no explanation

Return this exact format:
{
  "grades": [
    { "subjectCode": "CS 125", "subjectName": "CS Thesis 2", "grade": 1.5 },
    { "subjectCode": "GEC 19", "subjectName": "Ethics", "grade": 1.75 }
  ],
  "totalFound": 5,
  "confidence": "high"
}"""

PROMPTS = {
    PromptKind.CURRICULUM: CURRICULUM_PROMPT,
    PromptKind.COR: COR_PROMPT,
    PromptKind.GRADES: GRADES_PROMPT,
    PromptKind.TIMETABLE: TIMETABLE_PROMPT,
}


def get_prompt(kind: PromptKind) -> str:
    """Return the prompt text for a document kind."""
    return PROMPTS[PromptKind(kind)].strip()
