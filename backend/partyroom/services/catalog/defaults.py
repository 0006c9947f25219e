DEFAULT_GAMES = [
    {
        'name': 'Never Have I Ever',
        'description': 'Classic party game where players reveal things they have never done',
        'category': 'Confession',
        'min_players': 3,
        'max_players': 10,
        'questions': [
            {'id': 'nhie1', 'text': 'Never have I ever traveled to another country', 'difficulty': 'easy'},
            {'id': 'nhie2', 'text': 'Never have I ever stayed up all night', 'difficulty': 'easy'},
            {'id': 'nhie3', 'text': 'Never have I ever broken a bone', 'difficulty': 'medium'},
            {'id': 'nhie4', 'text': 'Never have I ever been on a roller coaster', 'difficulty': 'medium'},
            {'id': 'nhie5', 'text': 'Never have I ever gone skydiving', 'difficulty': 'hard'},
        ],
    },
    {
        'name': 'Truth or Dare',
        'description': 'Answer truthfully or take a dare',
        'category': 'Dare',
        'min_players': 4,
        'max_players': 8,
        'questions': [
            {'id': 'tod1', 'type': 'truth', 'text': 'What is your biggest fear?', 'difficulty': 'medium'},
            {'id': 'tod2', 'type': 'dare', 'text': 'Do your best impression of someone in the room', 'difficulty': 'easy'},
            {'id': 'tod3', 'type': 'truth', 'text': 'What is the most embarrassing thing that has happened to you?', 'difficulty': 'hard'},
            {'id': 'tod4', 'type': 'dare', 'text': 'Sing a song chosen by the group', 'difficulty': 'medium'},
            {'id': 'tod5', 'type': 'truth', 'text': 'Who was your first crush?', 'difficulty': 'easy'},
        ],
    },
    {
        'name': 'Would You Rather',
        'description': 'Choose between two options',
        'category': 'Choice',
        'min_players': 2,
        'max_players': 10,
        'questions': [
            {'id': 'wyr1', 'text': 'Would you rather have the ability to fly or be invisible?',
             'optionA': 'Fly', 'optionB': 'Be invisible', 'difficulty': 'easy'},
            {'id': 'wyr2', 'text': 'Would you rather always be 10 minutes late or always be 20 minutes early?',
             'optionA': '10 minutes late', 'optionB': '20 minutes early', 'difficulty': 'easy'},
            {'id': 'wyr3', 'text': 'Would you rather have unlimited money or unlimited time?',
             'optionA': 'Unlimited money', 'optionB': 'Unlimited time', 'difficulty': 'medium'},
            {'id': 'wyr4', 'text': 'Would you rather be able to read minds or see the future?',
             'optionA': 'Read minds', 'optionB': 'See the future', 'difficulty': 'medium'},
            {'id': 'wyr5', 'text': 'Would you rather live without internet or without air conditioning?',
             'optionA': 'Without internet', 'optionB': 'Without air conditioning', 'difficulty': 'hard'},
        ],
    },
    {
        'name': 'Charades',
        'description': 'Act out words silently',
        'category': 'Action',
        'min_players': 4,
        'max_players': 12,
        'questions': [
            {'id': 'char1', 'text': 'Movie: The Lion King', 'category': 'movie', 'difficulty': 'easy'},
            {'id': 'char2', 'text': 'Action: Brushing teeth', 'category': 'action', 'difficulty': 'easy'},
            {'id': 'char3', 'text': 'Animal: Elephant', 'category': 'animal', 'difficulty': 'medium'},
            {'id': 'char4', 'text': 'Movie: Titanic', 'category': 'movie', 'difficulty': 'medium'},
            {'id': 'char5', 'text': 'Action: Playing basketball', 'category': 'action', 'difficulty': 'hard'},
        ],
    },
    {
        'name': 'Two Truths and a Lie',
        'description': 'Guess which statement is false',
        'category': 'Mystery',
        'min_players': 3,
        'max_players': 8,
        'questions': [
            {'id': 'ttal1', 'text': 'Example template: "I have been to 5 countries, I can speak 3 languages, I have never been on a plane"',
             'hint': 'Players create their own - this is a template', 'difficulty': 'easy'},
            {'id': 'ttal2', 'text': 'Example template: "I have a pet, I love spicy food, I am afraid of heights"',
             'hint': 'Players create their own - this is a template', 'difficulty': 'easy'},
            {'id': 'ttal3', 'text': 'Example template: "I can play piano, I have a twin, I have never broken a bone"',
             'hint': 'Players create their own - this is a template', 'difficulty': 'medium'},
            {'id': 'ttal4', 'text': 'Example template: "I have met a celebrity, I can solve a Rubik\'s cube, I have never been to a concert"',
             'hint': 'Players create their own - this is a template', 'difficulty': 'medium'},
            {'id': 'ttal5', 'text': 'Example template: "I have been skydiving, I can speak 5 languages, I have never been to a beach"',
             'hint': 'Players create their own - this is a template', 'difficulty': 'hard'},
        ],
    },
]
