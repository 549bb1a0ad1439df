# Hippies Portal - Applicant Questionnaire
# The employment questionnaire every job applicant answers

import random
from typing import Any, Optional


# (id, question, choices, index of the correct choice)
QUESTIONS = (
    ("q1", "You're scheduled to work at 8 AM but your car breaks down at 7:30. What should you do first?",
     ("Call a friend to complain",
      "Call your manager immediately and explain the situation",
      "Post about it on social media",
      "Just show up late without saying anything"), 1),
    ("q2", "A customer drops a $20 bill on the floor and doesn't notice. What should you do?",
     ("Keep it quietly",
      "Pick it up and return it to the customer",
      "Split it with a coworker",
      "Wait to see if anyone else claims it"), 1),
    ("q3", "You notice a coworker not doing their job and it's affecting you. What's the best way to handle it?",
     ("Yell at them",
      "Politely talk to them or notify your manager if needed",
      "Ignore it completely",
      "Post about them online"), 1),
    ("q4", "If you spill something on the floor, what should you do?",
     ("Walk away and pretend it's not yours",
      "Clean it up right away or report it",
      "Wait for the janitor",
      "Warn customers not to step there"), 1),
    ("q5", "A customer is angry and yelling. What should you do?",
     ("Yell back",
      "Stay calm, listen, and get a manager if necessary",
      "Walk away",
      "Record them on your phone"), 1),
    ("q6", "Your manager gives you a task you don't understand. What do you do?",
     ("Guess what to do",
      "Ask for clarification before starting",
      "Ignore it",
      "Ask a coworker to do it for you"), 1),
    ("q7", "You find a phone left on the counter. What's the best action?",
     ("Keep it until someone asks",
      "Turn it in to a manager or lost-and-found immediately",
      "Leave it where it is",
      "Try to unlock it"), 1),
    ("q8", "You notice the front of the store is messy but it's not your area. What do you do?",
     ("Ignore it",
      "Tidy it up or notify the person responsible",
      "Wait for your manager to say something",
      "Tell a customer to avoid it"), 1),
    ("q9", "A customer asks a question you don't know the answer to. What's best?",
     ("Make up an answer",
      "Say 'I don't know' and walk away",
      "Tell them you're not sure but you'll ask someone who knows",
      "Tell them to Google it"), 2),
    ("q10", "You're working and a friend stops by to hang out. What should you do?",
     ("Talk for a while since it's slow",
      "Politely tell them you can't talk while working",
      "Invite them behind the counter",
      "Ignore other customers"), 1),
    ("q11", "The power goes out during your shift. What's the first thing you should do?",
     ("Leave immediately",
      "Continue selling as normal",
      "Stay calm and wait for manager instructions",
      "Use your phone's flashlight and keep working"), 2),
    ("q12", "You accidentally ring something up wrong. What's the right step?",
     ("Ignore it",
      "Tell a manager and correct the sale",
      "Ask the customer to pay extra",
      "Pretend it didn't happen"), 1),
    ("q13", "You're assigned a boring or repetitive task. What should you do?",
     ("Refuse to do it",
      "Do it correctly with a positive attitude",
      "Work slower",
      "Ask someone else to trade tasks"), 1),
    ("q14", "A coworker jokes about stealing merchandise. What should you do?",
     ("Laugh it off",
      "Report it to a manager immediately",
      "Join the joke",
      "Keep it secret"), 1),
    ("q15", "You're 10 minutes early for your shift. What's the right thing to do?",
     ("Clock in early to earn extra pay",
      "Wait until your scheduled time unless told otherwise",
      "Leave and come back later",
      "Hang out behind the counter"), 1),
    ("q16", "You accidentally break a product. What should you do?",
     ("Hide it",
      "Tell your manager right away",
      "Blame someone else",
      "Leave it on the shelf"), 1),
    ("q17", "You're told to stop using your phone at work. What's the best reaction?",
     ("Argue about it",
      "Put it away and follow the rule",
      "Keep using it secretly",
      "Quit"), 1),
    ("q18", "You notice a small fire starting in a trash can. What should you do first?",
     ("Run out of the building",
      "Alert others and use the fire extinguisher if safe to do so",
      "Take a video for proof",
      "Try to stomp it out"), 1),
    ("q20", "You're unsure how to do part of your job, but don't want to look dumb. What's the best move?",
     ("Guess and hope it's right",
      "Ask your manager or coworker for guidance",
      "Pretend you know",
      "Wait until someone notices"), 1),
    ("q21", "You accidentally see a coworker taking money from the register. What should you do?",
     ("Confront them privately",
      "Ignore it",
      "Report it to management immediately",
      "Record them for social media"), 2),
    ("q22", "Your friend asks for a 'hook-up' or discount without permission. What do you do?",
     ("Give it to them quietly",
      "Politely refuse and explain store policy",
      "Charge them half",
      "Let them take it"), 1),
    ("q23", "You made a mistake that cost the company money. What's the best way to handle it?",
     ("Hide it",
      "Report it and offer to help fix it",
      "Blame someone else",
      "Pretend it didn't happen"), 1),
    ("q24", "Your manager is gone and a customer overpays. What's the right action?",
     ("Keep the extra money",
      "Tell the customer and return the extra",
      "Put it in a tip jar",
      "Wait until the manager returns"), 1),
    ("q25", "You realize a coworker is clocking in early to get extra pay. What should you do?",
     ("Join them",
      "Ignore it",
      "Report it privately to management",
      "Joke about it"), 2),
)

QUESTIONS_BY_ID = {q[0]: q for q in QUESTIONS}


def randomized_quiz(rng: Optional[random.Random] = None) -> list[dict[str, Any]]:
    """Questions in random order, choices shuffled, no answers."""
    rng = rng or random.Random()
    questions = []
    for question_id, text, choices, _ in QUESTIONS:
        shuffled = list(choices)
        rng.shuffle(shuffled)
        questions.append({"id": question_id, "question": text, "choices": shuffled})
    rng.shuffle(questions)
    return questions


def grade_answers(answers: dict[str, str]) -> tuple[int, list[dict[str, Any]]]:
    """
    Grade {question_id: chosen choice text}.

    Returns (number correct, stored answers). Unknown question ids are
    ignored; unanswered questions are recorded with selected=None.
    """
    score = 0
    graded = []
    for question_id, text, choices, correct_index in QUESTIONS:
        selected = answers.get(question_id)
        correct = selected == choices[correct_index]
        score += correct
        graded.append({"question": text, "selected": selected, "correct": correct})
    return score, graded
